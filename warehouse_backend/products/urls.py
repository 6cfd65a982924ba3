# products/urls.py

"""
PRODUCTS URLS

Routes under /api/products/:
    products/            (read-only list + detail)
    products/low-stock/
"""

from django.urls import include, path
from rest_framework.routers import DefaultRouter

from products.views import ProductViewSet

router = DefaultRouter()
router.register(r"products", ProductViewSet, basename="products")

urlpatterns = [
    path("", include(router.urls)),
]
