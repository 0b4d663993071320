from django.contrib import admin
from .models import ExchangeRequest


@admin.register(ExchangeRequest)
class ExchangeRequestAdmin(admin.ModelAdmin):
    list_display = ("id", "shift", "kind", "status", "requester", "target_user", "candidate", "created_at")
    list_filter = ("status", "kind", "shift__role")
    search_fields = ("requester__email", "target_user__email", "candidate__email", "notes")
    ordering = ("-created_at",)
    list_select_related = ("shift__role", "requester", "target_user", "candidate")
    # Status, candidate and resolution are written only by ExchangeWorkflowService
    readonly_fields = (
        "shift",
        "requester",
        "kind",
        "status",
        "target_user",
        "target_shift",
        "candidate",
        "resolved_by",
        "resolved_at",
        "created_at",
        "updated_at",
    )

    def has_add_permission(self, request):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
