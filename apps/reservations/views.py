"""API views for the reservation core.

Views only translate HTTP into calls on ``apps.reservations.services``;
every rule lives in the core. Core errors are answered as
``{"error": code, "detail": message}`` with the status the error names.
"""

from __future__ import annotations

import logging

from drf_spectacular.utils import extend_schema  # type: ignore
from rest_framework import mixins, permissions, status, viewsets  # type: ignore
from rest_framework.decorators import action  # type: ignore
from rest_framework.response import Response  # type: ignore
from rest_framework.views import APIView  # type: ignore

from . import services
from .exceptions import ReservationError
from .filters import OwnerReservationFilter
from .permissions import IsVenueOwner
from .serializers import (
    AvailabilityQuerySerializer,
    ManualBookingSerializer,
    ReservationSerializer,
    SelfServiceBookingSerializer,
    SlotGridQuerySerializer,
)

logger = logging.getLogger(__name__)


class ReservationErrorMixin:
    """Render reservation core errors with their code and status."""

    def handle_exception(self, exc):  # type: ignore
        if isinstance(exc, ReservationError):
            logger.info(f"Reservation request rejected: {exc.code} ({exc.message})")
            return Response({"error": exc.code, "detail": exc.message}, status=exc.status_code)
        return super().handle_exception(exc)


class AvailabilityView(ReservationErrorMixin, APIView):
    """Booked intervals of a field on one venue-local date. Public."""

    permission_classes = [permissions.AllowAny]

    @extend_schema(parameters=[AvailabilityQuerySerializer])
    def get(self, request):  # type: ignore
        query = AvailabilityQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)
        field_id = query.validated_data["field"]
        day = query.validated_data["date"]
        booked = services.get_availability(field_id, day)
        return Response({"field": str(field_id), "date": day.isoformat(), "booked": booked})


class ReservationViewSet(ReservationErrorMixin, mixins.ListModelMixin, viewsets.GenericViewSet):
    """Self-service bookings plus the owner's confirm and cancel actions."""

    serializer_class = ReservationSerializer

    def get_permissions(self):  # type: ignore
        if self.action == "create":
            return [permissions.AllowAny()]
        if self.action in ("confirm", "cancel"):
            return [IsVenueOwner()]
        return [permissions.IsAuthenticated()]

    def get_queryset(self):  # type: ignore
        return services.list_reservations_for_account(self.request.user)

    @extend_schema(request=SelfServiceBookingSerializer, responses={201: ReservationSerializer})
    def create(self, request, *args, **kwargs):  # type: ignore
        serializer = SelfServiceBookingSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        account = request.user if request.user.is_authenticated else None
        reservation = services.create_self_service_booking(
            data["field"],
            data["date"],
            data["hours"],
            payment_proof=data["payment_proof"],
            account=account,
            visitor_name="" if account else data["visitor_name"],
            visitor_phone="" if account else data["visitor_phone"],
        )
        read_serializer = ReservationSerializer(reservation, context=self.get_serializer_context())
        return Response(read_serializer.data, status=status.HTTP_201_CREATED)

    @extend_schema(request=None, responses=ReservationSerializer)
    @action(detail=True, methods=["post"])
    def confirm(self, request, pk=None):  # type: ignore
        reservation = services.confirm_reservation(pk, request.user)
        return Response(ReservationSerializer(reservation).data)

    @extend_schema(request=None, responses=ReservationSerializer)
    @action(detail=True, methods=["post"])
    def cancel(self, request, pk=None):  # type: ignore
        reservation = services.cancel_reservation(pk, request.user)
        return Response(ReservationSerializer(reservation).data)


class OwnerBookingView(ReservationErrorMixin, APIView):
    """Manual booking entered by the venue owner; confirmed immediately."""

    permission_classes = [IsVenueOwner]

    @extend_schema(request=ManualBookingSerializer, responses={201: ReservationSerializer})
    def post(self, request):  # type: ignore
        serializer = ManualBookingSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        reservation = services.create_manual_booking(
            data["field"],
            data["date"],
            data["hours"],
            request.user,
            customer_name=data["customer_name"],
            customer_phone=data["customer_phone"],
        )
        return Response(ReservationSerializer(reservation).data, status=status.HTTP_201_CREATED)


class OwnerReservationViewSet(ReservationErrorMixin, mixins.ListModelMixin, viewsets.GenericViewSet):
    """Reservations on every field of the owner's venues."""

    serializer_class = ReservationSerializer
    permission_classes = [IsVenueOwner]
    filterset_class = OwnerReservationFilter

    def get_queryset(self):  # type: ignore
        return services.list_reservations_for_owner(self.request.user)


class OwnerFieldSlotsView(ReservationErrorMixin, APIView):
    """Hourly booked/free grid of one of the owner's fields."""

    permission_classes = [IsVenueOwner]

    @extend_schema(parameters=[SlotGridQuerySerializer])
    def get(self, request, field_id):  # type: ignore
        query = SlotGridQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)
        slots = services.get_slot_grid(
            field_id,
            query.validated_data["date"],
            days=query.validated_data["days"],
            owner=request.user,
        )
        return Response({"field": str(field_id), "slots": slots})
