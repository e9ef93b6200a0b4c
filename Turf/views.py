from rest_framework import permissions, status
from rest_framework.response import Response
from rest_framework.views import APIView

from .booking_service import BookingService
from .presentors import build_pricing_payload
from .serializers import (
    BookingCreateSerializer,
    BookingSerializer,
    BookingStatusSerializer,
)


# -------------------------------------------------------------------
# BOOKING CREATE (15-MINUTE HOLD)
# -------------------------------------------------------------------
class BookingCreateView(APIView):
    """
    Authenticated API
    Holds a slot as a pending booking and returns its pricing breakdown
    """
    permission_classes = [permissions.IsAuthenticated]

    def post(self, request):
        serializer = BookingCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        booking, pricing = BookingService.create_booking(
            turf_id=data["resource"],
            user=request.user,
            booking_date=data["date"],
            start_time=data["startTime"],
            end_time=data["endTime"],
        )

        return Response({
            "booking": BookingSerializer(booking).data,
            "pricing": build_pricing_payload(pricing),
        }, status=status.HTTP_201_CREATED)


# -------------------------------------------------------------------
# MY BOOKINGS
# -------------------------------------------------------------------
class MyBookingsView(APIView):
    permission_classes = [permissions.IsAuthenticated]

    def get(self, request):
        bookings = BookingService.list_user_bookings(request.user)
        return Response(BookingSerializer(bookings, many=True).data)


# -------------------------------------------------------------------
# BOOKING DETAIL / HARD DELETE
# -------------------------------------------------------------------
class BookingDetailView(APIView):
    """
    Authenticated API
    GET: owner, turf administrators and platform admins
    DELETE: platform admins only, removes the record outright
    """
    permission_classes = [permissions.IsAuthenticated]

    def get(self, request, booking_id):
        booking = BookingService.get_booking(booking_id, request.user)
        return Response({"booking": BookingSerializer(booking).data})

    def delete(self, request, booking_id):
        BookingService.delete_booking(booking_id, request.user)
        return Response(status=status.HTTP_204_NO_CONTENT)


# -------------------------------------------------------------------
# STATUS CHANGE (TURF ADMINS / OWNER SELF-CANCEL)
# -------------------------------------------------------------------
class BookingStatusView(APIView):
    permission_classes = [permissions.IsAuthenticated]

    def patch(self, request, booking_id):
        serializer = BookingStatusSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        booking = BookingService.update_booking_status(
            booking_id,
            serializer.validated_data["status"],
            request.user,
            settlement_method=serializer.validated_data.get("settlementMethod"),
        )
        return Response({"booking": BookingSerializer(booking).data})


class BookingCancelView(APIView):
    permission_classes = [permissions.IsAuthenticated]

    def patch(self, request, booking_id):
        booking = BookingService.cancel_booking(booking_id, request.user)
        return Response({"booking": BookingSerializer(booking).data})
