# suppliers/api/urls.py

from django.urls import path

from suppliers.api.views import (
    SupplierListCreateView,
    SupplierOrderListCreateView,
    SupplierOrderReceiveView,
)

urlpatterns = [
    path("suppliers/", SupplierListCreateView.as_view(), name="suppliers"),
    path("orders/", SupplierOrderListCreateView.as_view(), name="supplier-orders"),
    path(
        "orders/<int:order_id>/receive/",
        SupplierOrderReceiveView.as_view(),
        name="supplier-order-receive",
    ),
]
