"""Root URL configuration.

Every domain app is mounted under the versioned ``api/v1/`` prefix.
"""
from django.contrib import admin
from django.urls import include, path

urlpatterns = [
    path("admin/", admin.site.urls),
    path("api/v1/auth/", include("Accounts.urls")),
    path("api/v1/", include("slots.urls")),
    path("api/v1/", include("Turf.urls")),
    path("api/v1/payments/", include("Payments.urls")),
]
