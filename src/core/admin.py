"""Django admin for the audit journal."""
from django.contrib import admin

from core.models import AuditLog


@admin.register(AuditLog)
class AuditLogAdmin(admin.ModelAdmin):
    list_display = ("created_at", "actor", "rep", "action", "entity_type", "entity_id")
    list_filter = ("action", "entity_type")
    search_fields = (
        "entity_id",
        "actor__email",
        "rep__email",
        "action",
        "entity_type",
    )
    readonly_fields = (
        "actor",
        "rep",
        "action",
        "entity_type",
        "entity_id",
        "before_json",
        "after_json",
        "created_at",
    )
    date_hierarchy = "created_at"

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
