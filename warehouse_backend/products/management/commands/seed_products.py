import random
from datetime import timedelta

from django.core.management.base import BaseCommand
from django.utils import timezone

from batches.services import receive_batch
from products.models import Category, Product


class Command(BaseCommand):
    help = "Seed categories, products and FIFO stock batches (through receiving)"

    def add_arguments(self, parser):
        parser.add_argument(
            "--batches",
            type=int,
            default=2,
            help="Batches to receive per product (default 2).",
        )

    def handle(self, *args, **options):
        self.stdout.write(self.style.WARNING("Seeding products and stock..."))

        # -------------------------------
        # CATEGORIES
        # -------------------------------
        categories = [
            "Dry Goods",
            "Beverages",
            "Chilled",
            "Household",
        ]

        category_objs = {}
        for name in categories:
            obj, _ = Category.objects.get_or_create(name=name)
            category_objs[name] = obj

        # -------------------------------
        # PRODUCTS
        # -------------------------------
        products_data = [
            ("RICE-5KG", "Long Grain Rice 5kg", "Dry Goods", 20),
            ("OATS-1KG", "Rolled Oats 1kg", "Dry Goods", 15),
            ("JUICE-1L", "Orange Juice 1L", "Beverages", 30),
            ("YOG-500", "Natural Yoghurt 500g", "Chilled", 25),
            ("SOAP-BAR", "Laundry Soap Bar", "Household", 10),
        ]

        product_objs = []
        for sku, name, cat, threshold in products_data:
            product, _ = Product.objects.get_or_create(
                sku=sku,
                defaults={
                    "name": name,
                    "category": category_objs[cat],
                    "low_stock_threshold": threshold,
                },
            )
            product_objs.append(product)

        # -------------------------------
        # STOCK BATCHES (FIFO)
        # -------------------------------
        today = timezone.localdate()
        received = 0

        for product in product_objs:
            for i in range(options["batches"]):
                prod_date = today - timedelta(days=60 - i * 20)
                receive_batch(
                    product_id=product.id,
                    quantity=random.randint(20, 50),
                    prod_date=prod_date,
                    exp_date=prod_date + timedelta(days=180),
                    notes="seed",
                )
                received += 1

        self.stdout.write(
            self.style.SUCCESS(f"Seeded {len(product_objs)} products and {received} batches.")
        )
