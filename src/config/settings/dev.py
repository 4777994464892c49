"""Development settings."""
from .base import *  # noqa: F401,F403

DEBUG = True

# Debug toolbar
try:
    import debug_toolbar  # noqa: F401
    INSTALLED_APPS += ["debug_toolbar"]  # noqa: F405
    MIDDLEWARE.insert(0, "debug_toolbar.middleware.DebugToolbarMiddleware")  # noqa: F405
    INTERNAL_IPS = ["127.0.0.1"]
except ImportError:
    pass

# CORS
CORS_ALLOW_ALL_ORIGINS = True

# Auth cookies over plain http, tokens echoed in the body for API clients
JWT_AUTH_COOKIE_SECURE = False
JWT_RETURN_TOKENS_IN_BODY = env.bool("JWT_RETURN_TOKENS_IN_BODY", default=True)  # noqa: F405

# Planner: run Celery tasks inline unless a worker is explicitly wanted
CELERY_TASK_ALWAYS_EAGER = env.bool("CELERY_TASK_ALWAYS_EAGER", default=True)  # noqa: F405
PLANNER_NIGHTLY_REGENERATION = env.bool("PLANNER_NIGHTLY_REGENERATION", default=False)  # noqa: F405

# Logging
LOGGING["root"]["level"] = "DEBUG"  # noqa: F405
