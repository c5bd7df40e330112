import pytest
from rest_framework.test import APIClient

from authentication.models import Restaurant, User
from authentication.services import issue_token
from inventory.models import Product, Stock


@pytest.fixture(autouse=True)
def fast_password_hashing(settings):
    settings.PASSWORD_HASHERS = ['django.contrib.auth.hashers.MD5PasswordHasher']


@pytest.fixture
def owner(db):
    return User.objects.create_owner('proprietaire', password='owner123')


@pytest.fixture
def other_owner(db):
    return User.objects.create_owner('autre_proprietaire', password='owner456')


@pytest.fixture
def restaurant(owner):
    return Restaurant.objects.create(name='Restaurant Central', location='Centre-ville', owner=owner)


@pytest.fixture
def second_restaurant(owner):
    return Restaurant.objects.create(name='Restaurant Sud', location='Zone Sud', owner=owner)


@pytest.fixture
def foreign_restaurant(other_owner):
    return Restaurant.objects.create(name='Chez Autre', location='Plateau', owner=other_owner)


@pytest.fixture
def manager(owner, restaurant):
    return User.objects.create_manager('gerant1', 'manager123', restaurant=restaurant, created_by=owner)


@pytest.fixture
def second_manager(owner, second_restaurant):
    return User.objects.create_manager('gerant2', 'manager123', restaurant=second_restaurant, created_by=owner)


@pytest.fixture
def coca_cola(restaurant):
    product = Product.objects.create(
        restaurant=restaurant, name='Coca-Cola', type=Product.DRINK,
        price=500, drink_category='plastic_small',
    )
    Stock.objects.create(product=product, quantity=50, min_threshold=10)
    return product


@pytest.fixture
def dish(restaurant):
    return Product.objects.create(restaurant=restaurant, name='Riz au poisson', type=Product.DISH, price=2500)


def client_for(user):
    client = APIClient()
    client.credentials(HTTP_AUTHORIZATION=f'Bearer {issue_token(user)}')
    return client


@pytest.fixture
def make_client():
    return client_for


@pytest.fixture
def api_client():
    return APIClient()


@pytest.fixture
def owner_client(owner):
    return client_for(owner)


@pytest.fixture
def other_owner_client(other_owner):
    return client_for(other_owner)


@pytest.fixture
def manager_client(manager):
    return client_for(manager)


@pytest.fixture
def second_manager_client(second_manager):
    return client_for(second_manager)


@pytest.fixture
def coca_cola_order():
    """Payload for three Coca-Cola paid cash, without a catalog reference"""
    def build(restaurant_id, product_id=None, quantity=3, payment_method='cash'):
        item = {
            'name': 'Coca-Cola',
            'type': 'drink',
            'quantity': quantity,
            'unit_price': 500,
            'total_price': 500 * quantity,
            'drink_category': 'plastic_small',
        }
        if product_id is not None:
            item['product_id'] = product_id
        return {
            'restaurant_id': restaurant_id,
            'items': [item],
            'payment_method': payment_method,
            'total_amount': 500 * quantity,
        }
    return build
