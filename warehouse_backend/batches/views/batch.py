"""
======================================================
PATH: batches/views/batch.py
======================================================
PRODUCT BATCH VIEWSET

Purpose:
- Read batches (FIFO-ordered list + detail)
- Receive stock (creates a batch through the receiving service)
- Pre-check date conflicts before receiving
- Expiry scan (read-only)

RULES:
- No create/update/delete of batches through generic CRUD
- Quantities change only through allocation commit
"""

from __future__ import annotations

from django.core.exceptions import ValidationError
from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from batches.filters import ProductBatchFilter
from batches.models import ProductBatch
from batches.serializers import (
    ConflictCheckSerializer,
    ExpiringQuerySerializer,
    ProductBatchSerializer,
    ReceiveBatchSerializer,
)
from batches.services import BatchStoreError, receive_batch, scan_expiring
from batches.services.conflicts import check_conflicts as detect_conflicts
from permissions.roles import (
    CAP_INVENTORY_RECEIVE,
    CAP_INVENTORY_VIEW,
    HasCapability,
)

from .responses import store_error_response, validation_error_response


class ProductBatchViewSet(viewsets.ReadOnlyModelViewSet):
    serializer_class = ProductBatchSerializer
    permission_classes = [IsAuthenticated, HasCapability]
    filterset_class = ProductBatchFilter

    capability_map = {
        "list": CAP_INVENTORY_VIEW,
        "retrieve": CAP_INVENTORY_VIEW,
        "expiring": CAP_INVENTORY_VIEW,
        "check_conflicts": CAP_INVENTORY_RECEIVE,
        "receive": CAP_INVENTORY_RECEIVE,
    }

    def get_queryset(self):
        return ProductBatch.objects.select_related("product").fifo_ordered()

    # -------------------------------------------------
    # RECEIVE
    # -------------------------------------------------
    @extend_schema(tags=["batches"], request=ReceiveBatchSerializer, responses={201: dict})
    @action(detail=False, methods=["post"], url_path="receive")
    def receive(self, request):
        """
        POST /api/batches/batches/receive/

        Returns the created batch plus the date-conflict advisory (or null).
        """
        s = ReceiveBatchSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        v = s.validated_data

        try:
            result = receive_batch(
                product_id=v["product_id"],
                quantity=v["quantity"],
                prod_date=v.get("prod_date"),
                exp_date=v.get("exp_date"),
                supplier_id=v.get("supplier_id"),
                supplier_order_id=v.get("supplier_order_id"),
                cost_price=v.get("cost_price"),
                batch_number=v.get("batch_number"),
                notes=v.get("notes", ""),
            )
        except ValidationError as exc:
            return validation_error_response(exc)
        except BatchStoreError as exc:
            return store_error_response(exc)

        return Response(
            {
                "batch": ProductBatchSerializer(result.batch).data,
                "batch_number_generated": result.number_generated,
                "date_conflict": result.conflict.alert.to_dict() if result.conflict.has_alert else None,
            },
            status=status.HTTP_201_CREATED,
        )

    # -------------------------------------------------
    # CONFLICT PRE-CHECK
    # -------------------------------------------------
    @extend_schema(tags=["batches"], request=ConflictCheckSerializer, responses={200: dict})
    @action(detail=False, methods=["post"], url_path="check-conflicts")
    def check_conflicts(self, request):
        s = ConflictCheckSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        v = s.validated_data

        try:
            result = detect_conflicts(v["product_id"], v.get("prod_date"), v.get("exp_date"))
        except ValidationError as exc:
            return validation_error_response(exc)
        except BatchStoreError as exc:
            return store_error_response(exc)

        return Response(result.to_dict(), status=status.HTTP_200_OK)

    # -------------------------------------------------
    # EXPIRY SCAN
    # -------------------------------------------------
    @extend_schema(
        tags=["batches"],
        parameters=[
            OpenApiParameter(
                name="days",
                type=int,
                location=OpenApiParameter.QUERY,
                required=False,
                description="Look-ahead window in days (default from INVENTORY settings).",
            )
        ],
        responses={200: dict},
    )
    @action(detail=False, methods=["get"], url_path="expiring")
    def expiring(self, request):
        s = ExpiringQuerySerializer(data=request.query_params)
        s.is_valid(raise_exception=True)

        try:
            result = scan_expiring(s.validated_data.get("days"))
        except ValidationError as exc:
            return validation_error_response(exc)
        except BatchStoreError as exc:
            return store_error_response(exc)

        return Response(result.to_dict(), status=status.HTTP_200_OK)
