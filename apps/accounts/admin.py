from django.contrib import admin
from .models import RoleMembership, User


@admin.register(User)
class UserAdmin(admin.ModelAdmin):
    list_display = ("email", "first_name", "last_name", "short_name", "role", "is_active", "date_joined")
    list_filter = ("role", "is_active")
    search_fields = ("email", "first_name", "last_name", "short_name")
    ordering = ("last_name", "first_name")


@admin.register(RoleMembership)
class RoleMembershipAdmin(admin.ModelAdmin):
    list_display = ("user", "role", "can_edit_rota", "created_at")
    list_filter = ("role", "can_edit_rota")
    search_fields = ("user__email", "user__first_name", "user__last_name", "role__name")
    ordering = ("role", "user")
