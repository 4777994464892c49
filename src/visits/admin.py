"""Django admin for the visit log."""
from django.contrib import admin

from visits.models import Visit


@admin.register(Visit)
class VisitAdmin(admin.ModelAdmin):
    list_display = ("visited_at", "store", "rep", "visit_type")
    list_filter = ("visit_type",)
    search_fields = ("store__name", "rep__email", "note")
    raw_id_fields = ("store", "rep")
    list_select_related = ("store", "rep")
    date_hierarchy = "visited_at"
