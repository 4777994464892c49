"""Main API URL router for /api/v1/."""
from django.urls import include, path
from rest_framework.routers import DefaultRouter

from api.auth_views import CookieTokenObtainPairView, CookieTokenRefreshView, LogoutAPIView
from api.v1 import planner_views

router = DefaultRouter()
router.register(r"planner/items", planner_views.PlanItemViewSet, basename="plan-item")
router.register(r"planner", planner_views.PlannerViewSet, basename="planner")

urlpatterns = [
    path("auth/token/", CookieTokenObtainPairView.as_view(), name="token-obtain"),
    path("auth/token/refresh/", CookieTokenRefreshView.as_view(), name="token-refresh"),
    path("auth/logout/", LogoutAPIView.as_view(), name="logout"),
    path("", include(router.urls)),
]
