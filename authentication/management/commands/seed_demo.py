from django.core.management.base import BaseCommand
from django.db import transaction

from authentication.models import Restaurant, User
from inventory.models import Product, Stock

OWNER = ('proprietaire', 'owner123')
MANAGER_PASSWORD = 'manager123'

RESTAURANTS = [
    ('Restaurant Central', 'Centre-ville'),
    ('Restaurant Sud', 'Zone Sud'),
    ('Restaurant Nord', 'Zone Nord'),
]

CATALOG = [
    {'name': 'Riz au poisson', 'type': Product.DISH, 'price': 2500},
    {'name': 'Poulet braisé', 'type': Product.DISH, 'price': 3000},
    {'name': 'Thiéboudienne', 'type': Product.DISH, 'price': 2800},
    {'name': 'Coca-Cola', 'type': Product.DRINK, 'price': 500, 'drink_category': 'plastic_small'},
    {'name': 'Fanta', 'type': Product.DRINK, 'price': 800, 'drink_category': 'glass_small'},
    {'name': 'Eau minérale', 'type': Product.DRINK, 'price': 300, 'drink_category': 'plastic_small'},
]


class Command(BaseCommand):
    help = 'Create a demo owner, three restaurants with one manager each, and a starter catalog'

    @transaction.atomic
    def handle(self, *args, **options):
        if User.objects.exists():
            self.stdout.write('Users already exist, nothing to seed.')
            return

        owner = User.objects.create_owner(OWNER[0], password=OWNER[1])

        restaurants = []
        for index, (name, location) in enumerate(RESTAURANTS, start=1):
            restaurant = Restaurant.objects.create(name=name, location=location, owner=owner)
            User.objects.create_manager(
                f'gerant{index}', MANAGER_PASSWORD, restaurant=restaurant, created_by=owner
            )
            restaurants.append(restaurant)

        for entry in CATALOG:
            product = Product.objects.create(restaurant=restaurants[0], **entry)
            if product.is_stock_tracked:
                Stock.objects.create(product=product, quantity=50, min_threshold=10)

        self.stdout.write(self.style.SUCCESS(
            f"Seeded. Owner={OWNER[0]}/{OWNER[1]}, managers=gerant1..{len(RESTAURANTS)}/{MANAGER_PASSWORD}"
        ))
