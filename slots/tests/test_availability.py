from datetime import time, timedelta

from django.test import TestCase
from django.urls import reverse
from django.utils import timezone
from rest_framework import status
from rest_framework.test import APITestCase

from Turf.models import Booking
from Turf.tests.factories import future_date, make_booking, make_turf, make_user
from slots.services import build_availability


class BuildAvailabilityTests(TestCase):

    def setUp(self):
        self.turf = make_turf()
        self.player = make_user()
        self.day = future_date(weekday=6)  # Sunday

    def test_hourly_slots_between_opening_and_closing(self):
        result = build_availability(self.turf, self.day)

        self.assertEqual(len(result["slots"]), 17)
        self.assertEqual(result["slots"][0]["startTime"], "06:00")
        self.assertEqual(result["slots"][0]["endTime"], "07:00")
        self.assertEqual(result["slots"][-1]["startTime"], "22:00")
        self.assertEqual(result["slots"][-1]["endTime"], "23:00")
        self.assertEqual(result["date"], self.day.isoformat())
        self.assertEqual(result["dayType"], "sun_thu")

    def test_slot_prices_follow_rules(self):
        slots = {s["startTime"]: s for s in build_availability(self.turf, self.day)["slots"]}

        self.assertEqual(slots["09:00"]["pricePerSlot"], 2000.0)
        self.assertEqual(slots["18:00"]["pricePerSlot"], 3500.0)
        self.assertEqual(slots["18:00"]["dayTypeLabel"], "all_days")

    def test_default_label_without_rules(self):
        self.turf.pricing_rules = []
        slot = build_availability(self.turf, self.day)["slots"][0]

        self.assertEqual(slot["pricePerSlot"], 1500.0)
        self.assertEqual(slot["dayTypeLabel"], "default")

    def test_occupancy(self):
        make_booking(
            self.turf, self.player, self.day, start_time=time(8, 0),
            status=Booking.CONFIRMED, payment_status=Booking.PAID, expires_at=None,
        )
        make_booking(self.turf, self.player, self.day, start_time=time(9, 0))
        make_booking(
            self.turf, self.player, self.day, start_time=time(10, 0),
            created_at=timezone.now() - timedelta(minutes=20),
        )
        make_booking(
            self.turf, self.player, self.day, start_time=time(11, 0),
            status=Booking.CANCELLED,
        )

        slots = {s["startTime"]: s["isAvailable"] for s in build_availability(self.turf, self.day)["slots"]}

        self.assertFalse(slots["08:00"])
        self.assertFalse(slots["09:00"])
        self.assertTrue(slots["10:00"])
        self.assertTrue(slots["11:00"])
        self.assertTrue(slots["12:00"])

    def test_other_dates_do_not_occupy(self):
        make_booking(self.turf, self.player, self.day + timedelta(days=1))

        slots = build_availability(self.turf, self.day)["slots"]
        self.assertTrue(all(s["isAvailable"] for s in slots))

    def test_overnight_hours_wrap_past_midnight(self):
        self.turf.opening_time = time(18, 0)
        self.turf.closing_time = time(2, 0)

        slots = build_availability(self.turf, self.day)["slots"]

        starts = [s["startTime"] for s in slots]
        self.assertEqual(starts, ["18:00", "19:00", "20:00", "21:00", "22:00", "23:00", "00:00", "01:00"])
        self.assertEqual(slots[5]["endTime"], "00:00")
        self.assertEqual(slots[-1]["endTime"], "02:00")


class TurfAvailabilityAPITests(APITestCase):

    def setUp(self):
        self.turf = make_turf()

    def test_public_endpoint(self):
        day = future_date()
        response = self.client.get(
            reverse("turf-availability", args=[self.turf.id]), {"date": day.isoformat()}
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data["slots"]), 17)

    def test_missing_date(self):
        response = self.client.get(reverse("turf-availability", args=[self.turf.id]))

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data["error_code"], "VALIDATION_ERROR")

    def test_malformed_date(self):
        response = self.client.get(
            reverse("turf-availability", args=[self.turf.id]), {"date": "18/10/2026"}
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_unknown_turf(self):
        response = self.client.get(
            reverse("turf-availability", args=[9999]), {"date": future_date().isoformat()}
        )

        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data["error_code"], "NOT_FOUND")
