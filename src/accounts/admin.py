"""Django admin for planner users (reps and their managers)."""
from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin
from django.db.models import Count, Max, Q

from planner.dates import current_week
from planner.models import PlanItemStatus

from .models import User


@admin.register(User)
class UserAdmin(BaseUserAdmin):
    """Users with their territory size and planning activity at a glance."""

    list_display = (
        "email",
        "get_full_name",
        "rep_code",
        "role",
        "territory_size",
        "planned_this_week",
        "confirmed_this_week",
        "last_submitted_week",
        "is_active",
    )
    list_filter = ("role", "is_active", "is_staff")
    search_fields = ("email", "first_name", "last_name", "rep_code")
    ordering = ("last_name", "first_name")
    actions = ("activate_users", "deactivate_users")

    fieldsets = (
        (None, {"fields": ("email", "password")}),
        ("Representant", {"fields": ("first_name", "last_name", "phone", "rep_code")}),
        ("Role", {"fields": ("role", "is_active", "is_staff", "is_superuser", "groups")}),
        ("Dates", {"fields": ("last_login", "date_joined")}),
    )
    add_fieldsets = (
        (
            None,
            {
                "classes": ("wide",),
                "fields": ("email", "first_name", "last_name", "rep_code", "role", "password1", "password2"),
            },
        ),
    )
    readonly_fields = ("date_joined", "last_login")

    def get_queryset(self, request):
        week = current_week()
        return (
            super()
            .get_queryset(request)
            .annotate(
                _territory_size=Count("territory_stores", distinct=True),
                _planned=Count("plan_items", filter=Q(plan_items__planned_week=week), distinct=True),
                _confirmed=Count(
                    "plan_items",
                    filter=Q(plan_items__planned_week=week, plan_items__status=PlanItemStatus.CONFIRMED),
                    distinct=True,
                ),
                _last_submitted=Max("weekly_submissions__week_start"),
            )
        )

    @admin.display(description="Magasins", ordering="_territory_size")
    def territory_size(self, obj):
        return obj._territory_size

    @admin.display(description="Visites (semaine)", ordering="_planned")
    def planned_this_week(self, obj):
        return obj._planned

    @admin.display(description="Confirmees (semaine)", ordering="_confirmed")
    def confirmed_this_week(self, obj):
        return obj._confirmed

    @admin.display(description="Derniere semaine soumise", ordering="_last_submitted")
    def last_submitted_week(self, obj):
        return obj._last_submitted or "-"

    @admin.action(description="Activer les utilisateurs selectionnes")
    def activate_users(self, request, queryset):
        queryset.update(is_active=True)

    @admin.action(description="Desactiver les utilisateurs selectionnes")
    def deactivate_users(self, request, queryset):
        queryset.update(is_active=False)
