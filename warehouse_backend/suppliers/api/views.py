# suppliers/api/views.py

from django.db import transaction
from drf_spectacular.utils import extend_schema
from rest_framework import status
from rest_framework.generics import GenericAPIView
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from batches.serializers import ProductBatchSerializer
from batches.services import BatchStoreError
from permissions.roles import (
    CAP_INVENTORY_RECEIVE,
    CAP_INVENTORY_VIEW,
    HasCapability,
    user_has_capability,
)
from products.models import Product
from suppliers.api.serializers import (
    SupplierOrderCreateSerializer,
    SupplierOrderSerializer,
    SupplierSerializer,
)
from suppliers.models import Supplier, SupplierOrder, SupplierOrderItem
from suppliers.services.receiving_service import (
    SupplierReceivingError,
    receive_supplier_order,
)


def _forbidden():
    return Response(
        {"detail": "You do not have permission to perform this action."},
        status=status.HTTP_403_FORBIDDEN,
    )


class SupplierListCreateView(GenericAPIView):
    permission_classes = [IsAuthenticated, HasCapability]
    required_capability = CAP_INVENTORY_VIEW
    serializer_class = SupplierSerializer

    @extend_schema(tags=["suppliers"], responses=SupplierSerializer(many=True))
    def get(self, request):
        qs = Supplier.objects.filter(is_active=True).order_by("name")
        return Response(
            SupplierSerializer(qs, many=True).data, status=status.HTTP_200_OK
        )

    @extend_schema(
        tags=["suppliers"],
        request=SupplierSerializer,
        responses={201: SupplierSerializer},
    )
    def post(self, request):
        if not user_has_capability(request.user, CAP_INVENTORY_RECEIVE):
            return _forbidden()

        s = SupplierSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        supplier = s.save()
        return Response(
            SupplierSerializer(supplier).data, status=status.HTTP_201_CREATED
        )


class SupplierOrderListCreateView(GenericAPIView):
    permission_classes = [IsAuthenticated, HasCapability]
    required_capability = CAP_INVENTORY_VIEW
    serializer_class = SupplierOrderSerializer

    @extend_schema(tags=["suppliers"], responses=SupplierOrderSerializer(many=True))
    def get(self, request):
        qs = (
            SupplierOrder.objects.select_related("supplier")
            .prefetch_related("items", "items__product")
            .order_by("-created_at")
        )
        order_status = (request.query_params.get("status") or "").strip()
        if order_status:
            qs = qs.filter(status=order_status)
        return Response(
            SupplierOrderSerializer(qs, many=True).data, status=status.HTTP_200_OK
        )

    @extend_schema(
        tags=["suppliers"],
        request=SupplierOrderCreateSerializer,
        responses={201: SupplierOrderSerializer},
    )
    @transaction.atomic
    def post(self, request):
        if not user_has_capability(request.user, CAP_INVENTORY_RECEIVE):
            return _forbidden()

        s = SupplierOrderCreateSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        data = s.validated_data

        try:
            supplier = Supplier.objects.get(id=data["supplier_id"], is_active=True)
        except Supplier.DoesNotExist:
            return Response(
                {"detail": "Supplier not found"}, status=status.HTTP_400_BAD_REQUEST
            )

        order = SupplierOrder.objects.create(
            supplier=supplier,
            reference=data.get("reference", ""),
            status=SupplierOrder.STATUS_PENDING,
        )

        for line in data["items"]:
            try:
                product = Product.objects.get(id=line["product_id"])
            except Product.DoesNotExist:
                transaction.set_rollback(True)
                return Response(
                    {"detail": f"Product not found: {line['product_id']}"},
                    status=status.HTTP_400_BAD_REQUEST,
                )

            SupplierOrderItem.objects.create(
                order=order,
                product=product,
                quantity=line["quantity"],
                received_quantity=line.get("received_quantity"),
                prod_date=line.get("prod_date"),
                exp_date=line.get("exp_date"),
                cost_price=line.get("cost_price"),
                batch_number=line.get("batch_number", ""),
                notes=line.get("notes", ""),
            )

        return Response(
            SupplierOrderSerializer(order).data, status=status.HTTP_201_CREATED
        )


class SupplierOrderReceiveView(GenericAPIView):
    permission_classes = [IsAuthenticated, HasCapability]
    required_capability = CAP_INVENTORY_RECEIVE

    @extend_schema(tags=["suppliers"], request=None, responses={200: dict})
    def post(self, request, order_id: int):
        try:
            result = receive_supplier_order(order_id=order_id)
        except SupplierReceivingError as exc:
            return Response({"detail": str(exc)}, status=status.HTTP_400_BAD_REQUEST)
        except BatchStoreError as exc:
            return Response(
                {"detail": str(exc), "alert": exc.alert.to_dict()},
                status=status.HTTP_503_SERVICE_UNAVAILABLE,
            )

        return Response(
            {
                "order": SupplierOrderSerializer(result.order).data,
                "batches": ProductBatchSerializer(result.batches, many=True).data,
                "date_conflicts": {
                    str(product_id): [alert.to_dict() for alert in alerts]
                    for product_id, alerts in result.date_conflicts.items()
                },
            },
            status=status.HTTP_200_OK,
        )
