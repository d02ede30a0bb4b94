"""Admin registrations for venues and fields."""

from __future__ import annotations

from django.contrib import admin, messages
from django.utils.translation import gettext_lazy as _

from .models import Field, Venue
from .services import retire_field, retire_venue


class FieldInline(admin.TabularInline):
    model = Field
    extra = 0
    fields = ("name", "kind", "price_per_hour", "is_active")
    readonly_fields = ("is_active",)


@admin.register(Venue)
class VenueAdmin(admin.ModelAdmin):
    list_display = ("name", "owner", "location", "timezone", "is_active", "created_at")
    list_filter = ("is_active", "timezone")
    search_fields = ("name", "location", "owner__email")
    readonly_fields = ("is_active", "deleted_at", "created_at", "updated_at")
    inlines = [FieldInline]
    actions = ["retire_selected"]

    @admin.action(description=_("Retire venues and cancel their reservations"))
    def retire_selected(self, request, queryset):  # type: ignore
        cancelled = 0
        for venue in queryset.filter(is_active=True):
            cancelled += retire_venue(venue.pk)
        self.message_user(
            request,
            _("Cancelled %(count)d reservation(s).") % {"count": cancelled},
            messages.SUCCESS,
        )


@admin.register(Field)
class FieldAdmin(admin.ModelAdmin):
    list_display = ("name", "venue", "kind", "price_per_hour", "is_active")
    list_filter = ("kind", "is_active")
    search_fields = ("name", "venue__name")
    readonly_fields = ("is_active", "deleted_at", "created_at", "updated_at")
    actions = ["retire_selected"]

    @admin.action(description=_("Retire fields and cancel their reservations"))
    def retire_selected(self, request, queryset):  # type: ignore
        cancelled = 0
        for field in queryset.filter(is_active=True):
            cancelled += retire_field(field.pk)
        self.message_user(
            request,
            _("Cancelled %(count)d reservation(s).") % {"count": cancelled},
            messages.SUCCESS,
        )
