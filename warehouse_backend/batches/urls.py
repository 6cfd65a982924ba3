# batches/urls.py

"""
BATCHES URLS

Registered under /api/batches/:
    batches/                    list / detail
    batches/receive/            receiving
    batches/check-conflicts/    date-conflict pre-check
    batches/expiring/           expiry scan
    allocations/plan/           FIFO plan
    allocations/manual-plan/    worker-picked plan
    allocations/commit/         apply plan
"""

from django.urls import include, path
from rest_framework.routers import DefaultRouter

from batches.views import AllocationViewSet, ProductBatchViewSet

router = DefaultRouter()
router.register(r"batches", ProductBatchViewSet, basename="batches")
router.register(r"allocations", AllocationViewSet, basename="allocations")

urlpatterns = [
    path("", include(router.urls)),
]
