# products/views/product.py

"""
PRODUCT VIEWSET

Purpose:
- Read-only product catalog with live stock totals
- Low stock report

Products are master data managed in the admin.
Stock is never written here; it moves only through receiving and allocation.
"""

from django.db.models import F, Q, Sum
from django.db.models.functions import Coalesce
from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from batches.models import ProductBatch
from permissions.roles import CAP_INVENTORY_VIEW, HasCapability
from products.models import Product
from products.serializers import ProductSerializer


@extend_schema(tags=["products"])
class ProductViewSet(viewsets.ReadOnlyModelViewSet):
    serializer_class = ProductSerializer
    permission_classes = [IsAuthenticated, HasCapability]
    required_capability = CAP_INVENTORY_VIEW

    def get_queryset(self):
        """
        Annotate available_stock to avoid N+1 on product lists.
        Only Active batches count.
        """
        active = Q(batches__status=ProductBatch.Status.ACTIVE)

        qs = Product.objects.select_related("category").annotate(
            available_stock=Coalesce(Sum("batches__quantity", filter=active), 0)
        )

        q = (self.request.query_params.get("q") or "").strip()
        if q:
            qs = qs.filter(Q(name__icontains=q) | Q(sku__icontains=q))

        return qs.order_by("-created_at")

    @extend_schema(
        tags=["products"],
        parameters=[
            OpenApiParameter(
                name="threshold",
                type=int,
                location=OpenApiParameter.QUERY,
                required=False,
                description="Override each product's own low_stock_threshold.",
            ),
        ],
    )
    @action(detail=False, methods=["get"], url_path="low-stock")
    def low_stock(self, request):
        """
        GET /api/products/products/low-stock/

        Active products whose available stock is at or below the threshold.
        """
        qs = self.get_queryset().filter(is_active=True)

        raw_threshold = (request.query_params.get("threshold") or "").strip()
        if raw_threshold:
            try:
                threshold = int(raw_threshold)
                if threshold < 0:
                    raise ValueError
            except ValueError:
                return Response(
                    {"detail": "threshold must be a non-negative integer"}, status=400
                )
            qs = qs.filter(available_stock__lte=threshold)
        else:
            qs = qs.filter(available_stock__lte=F("low_stock_threshold"))

        data = self.get_serializer(qs, many=True).data
        return Response({"count": len(data), "results": data})
