from django.urls import path

from .views import TurfAvailabilityView

urlpatterns = [
    path(
        "turfs/<int:turf_id>/availability/",
        TurfAvailabilityView.as_view(),
        name="turf-availability",
    ),
]
