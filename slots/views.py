from rest_framework.exceptions import NotFound
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.views import APIView

from Turf.models import Turf
from slots.serializers import AvailabilityQuerySerializer
from slots.services import build_availability


class TurfAvailabilityView(APIView):
    """
    Public API
    Hourly slots of a turf for one date, with availability and price
    """
    permission_classes = [AllowAny]
    authentication_classes = []

    def get(self, request, turf_id):
        serializer = AvailabilityQuerySerializer(data=request.query_params)
        serializer.is_valid(raise_exception=True)

        turf = Turf.objects.only(
            "id", "opening_time", "closing_time", "price", "pricing_rules"
        ).filter(id=turf_id, is_active=True).first()

        if not turf:
            raise NotFound("Turf not found")

        data = build_availability(turf, serializer.validated_data["date"])
        return Response(data)
