"""Admin registration for reservations.

Reservations are read-only here: they are created by the booking
transaction and change status only through the lifecycle handlers.
"""

from __future__ import annotations

from django.contrib import admin, messages
from django.db.models import Q
from django.utils.translation import gettext_lazy as _

from .models import Reservation
from .services import cancel_reservations_where


@admin.register(Reservation)
class ReservationAdmin(admin.ModelAdmin):
    list_display = (
        "id",
        "field",
        "start_time",
        "end_time",
        "status",
        "source",
        "requester_name",
        "total_price",
        "created_at",
    )
    list_filter = ("status", "source", "cancellation_source", "start_time")
    search_fields = ("id", "visitor_name", "visitor_phone", "account__email", "field__name")
    list_select_related = ("field", "account")
    date_hierarchy = "start_time"
    actions = ["cancel_selected"]

    def has_add_permission(self, request):  # type: ignore
        return False

    def has_change_permission(self, request, obj=None):  # type: ignore
        return False

    @admin.action(description=_("Cancel selected reservations"))
    def cancel_selected(self, request, queryset):  # type: ignore
        cancelled = cancel_reservations_where(Q(pk__in=list(queryset.values_list("pk", flat=True))))
        self.message_user(
            request,
            _("Cancelled %(count)d reservation(s).") % {"count": cancelled},
            messages.SUCCESS,
        )
