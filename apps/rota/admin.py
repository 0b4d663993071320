from django.contrib import admin
from .models import Role, Shift


@admin.register(Role)
class RoleAdmin(admin.ModelAdmin):
    list_display = ("name", "marketplace_auto_approve", "created_at")
    list_filter = ("marketplace_auto_approve",)
    search_fields = ("name",)
    ordering = ("name",)


@admin.register(Shift)
class ShiftAdmin(admin.ModelAdmin):
    list_display = ("role", "label", "date", "start_time", "end_time", "owner", "is_published")
    list_filter = ("role", "is_published")
    search_fields = ("role__name", "label", "owner__email")
    ordering = ("date", "start_time")
