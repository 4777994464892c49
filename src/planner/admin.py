"""Django admin for the call planner."""
from django.contrib import admin

from planner.models import PlanItem, WeeklySubmission


@admin.register(PlanItem)
class PlanItemAdmin(admin.ModelAdmin):
    list_display = ("store", "rep", "planned_week", "day_of_week", "position", "status", "confirmed_time")
    list_filter = ("status", "day_of_week", "planned_week")
    search_fields = ("store__name", "store__postcode", "rep__email", "rep__last_name")
    raw_id_fields = ("rep", "store")
    readonly_fields = ("created_at", "updated_at")
    ordering = ("-planned_week", "rep", "day_of_week", "position")
    date_hierarchy = "planned_week"


@admin.register(WeeklySubmission)
class WeeklySubmissionAdmin(admin.ModelAdmin):
    list_display = ("rep", "week_start", "submitted_at")
    list_filter = ("week_start",)
    search_fields = ("rep__email", "rep__first_name", "rep__last_name")
    readonly_fields = ("submitted_at", "created_at", "updated_at")
    ordering = ("-week_start",)
