"""Django admin configuration for the store directory."""
from django.contrib import admin

from stores.models import Store


@admin.register(Store)
class StoreAdmin(admin.ModelAdmin):
    list_display = ("name", "grade", "rep", "state", "postcode", "channel_type", "is_prospect", "is_active")
    list_filter = ("grade", "is_active", "is_prospect", "state")
    search_fields = ("name", "external_ref", "postcode", "rep__email", "rep__last_name")
    readonly_fields = ("id", "created_at", "updated_at")
    raw_id_fields = ("rep",)
    list_select_related = ("rep",)
    list_per_page = 50
