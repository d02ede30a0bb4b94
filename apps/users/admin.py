"""Admin registrations for the users domain."""

from __future__ import annotations

from django.contrib import admin, messages
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin
from django.utils.translation import gettext_lazy as _

from .models import CustomUser
from .services import deactivate_account


@admin.register(CustomUser)
class CustomUserAdmin(BaseUserAdmin):
    fieldsets = (
        (None, {"fields": ("email", "password")}),
        (_("Personal info"), {"fields": ("username", "first_name", "last_name", "phone")}),
        (_("Role"), {"fields": ("role",)}),
        (
            _("Permissions"),
            {"fields": ("is_active", "is_staff", "is_superuser", "groups", "user_permissions")},
        ),
        (_("Important dates"), {"fields": ("last_login", "date_joined", "deactivated_at")}),
    )
    add_fieldsets = (
        (
            None,
            {
                "classes": ("wide",),
                "fields": ("email", "phone", "role", "password1", "password2"),
            },
        ),
    )
    list_display = ("email", "username", "phone", "role", "is_active", "created_at")
    list_filter = ("role", "is_active", "is_staff")
    search_fields = ("email", "username", "phone")
    ordering = ("-created_at",)
    readonly_fields = ("last_login", "date_joined", "deactivated_at")
    actions = ["deactivate_selected"]

    @admin.action(description=_("Deactivate accounts and cancel their reservations"))
    def deactivate_selected(self, request, queryset):  # type: ignore
        cancelled = 0
        for user in queryset:
            cancelled += deactivate_account(user.pk)
        self.message_user(
            request,
            _("Deactivated %(users)d account(s), cancelled %(count)d reservation(s).")
            % {"users": queryset.count(), "count": cancelled},
            messages.SUCCESS,
        )
