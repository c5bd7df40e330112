import re
from datetime import timedelta
from unittest import mock

import pytest
from django.db import DatabaseError
from django.utils import timezone

from authentication.exceptions import InsufficientStock
from inventory.models import Product, Stock, StockMovement
from inventory.services import decrement_stock
from orders.models import Order, OrderItem
from orders.services import place_order

pytestmark = pytest.mark.django_db

URL = '/api/orders/'


def stock_of(product):
    return Stock.objects.get(product=product).quantity


def assert_nothing_written():
    assert not Order.objects.exists()
    assert not OrderItem.objects.exists()
    assert not StockMovement.objects.exists()


# ── Placement ─────────────────────────────────────────────────

class TestPlaceOrder:
    def test_drink_sale_decrements_stock_and_records_movement(
        self, manager_client, manager, restaurant, coca_cola, coca_cola_order
    ):
        response = manager_client.post(URL, coca_cola_order(restaurant.id, coca_cola.id), format='json')

        assert response.status_code == 201
        body = response.json()
        order = Order.objects.get(id=body['order_id'])
        assert body['order_number'] == order.order_number
        assert body['order']['total_amount'] == 1500
        assert body['order']['items'][0]['product_name'] == 'Coca-Cola'
        assert order.manager == manager
        assert order.payment_method == Order.CASH

        assert stock_of(coca_cola) == 47
        movement = StockMovement.objects.get()
        assert movement.movement_type == StockMovement.SALE
        assert movement.quantity_change == -3
        assert (movement.quantity_before, movement.quantity_after) == (50, 47)
        assert movement.order == order
        assert movement.user == manager
        assert order.order_number in movement.notes

    def test_owner_can_order_for_own_restaurant(self, owner_client, restaurant, coca_cola, coca_cola_order):
        response = owner_client.post(URL, coca_cola_order(restaurant.id, coca_cola.id), format='json')

        assert response.status_code == 201

    def test_order_number_format(self, manager, restaurant, coca_cola):
        order = place_order(manager, restaurant.id, [
            {'product_id': coca_cola.id, 'name': 'Coca-Cola', 'type': 'drink', 'quantity': 1, 'unit_price': 500},
        ], 'cash', 500)

        assert re.fullmatch(r'CMD-\d{13}-[A-Z0-9]{5}', order.order_number)

    def test_dish_lines_leave_stock_untouched(self, manager_client, restaurant, dish, coca_cola):
        payload = {
            'restaurant_id': restaurant.id,
            'payment_method': 'electronic',
            'total_amount': 5500,
            'items': [
                {'product_id': dish.id, 'name': dish.name, 'type': 'dish', 'quantity': 2,
                 'unit_price': 2500, 'total_price': 5000},
                {'product_id': coca_cola.id, 'name': 'Coca-Cola', 'type': 'drink', 'quantity': 1,
                 'unit_price': 500, 'total_price': 500},
            ],
        }

        response = manager_client.post(URL, payload, format='json')

        assert response.status_code == 201
        assert not Stock.objects.filter(product=dish).exists()
        assert StockMovement.objects.filter(product=dish).count() == 0
        assert stock_of(coca_cola) == 49

    def test_sequential_orders_see_each_other(self, manager, restaurant, coca_cola):
        item = {'product_id': coca_cola.id, 'name': 'Coca-Cola', 'type': 'drink', 'quantity': 3, 'unit_price': 500}

        place_order(manager, restaurant.id, [item], 'cash', 1500)
        place_order(manager, restaurant.id, [item], 'cash', 1500)

        assert stock_of(coca_cola) == 44
        assert [m.quantity_after for m in StockMovement.objects.order_by('id')] == [47, 44]

    def test_missing_restaurant_id(self, manager_client, restaurant, coca_cola_order):
        payload = coca_cola_order(restaurant.id)
        del payload['restaurant_id']

        response = manager_client.post(URL, payload, format='json')

        assert response.status_code == 400
        assert response.json()['code'] == 'invalid_order'


# ── Access ────────────────────────────────────────────────────

class TestOrderAccess:
    def test_manager_of_another_restaurant_is_forbidden(
        self, second_manager_client, restaurant, coca_cola, coca_cola_order
    ):
        response = second_manager_client.post(URL, coca_cola_order(restaurant.id, coca_cola.id), format='json')

        assert response.status_code == 403
        assert response.json()['code'] == 'forbidden'
        assert_nothing_written()
        assert stock_of(coca_cola) == 50

    def test_owner_of_another_restaurant_gets_not_found(
        self, other_owner_client, restaurant, coca_cola, coca_cola_order
    ):
        response = other_owner_client.post(URL, coca_cola_order(restaurant.id, coca_cola.id), format='json')

        assert response.status_code == 404
        assert_nothing_written()

    def test_unauthenticated(self, api_client, restaurant, coca_cola_order):
        assert api_client.post(URL, coca_cola_order(restaurant.id), format='json').status_code == 401

    def test_product_of_another_restaurant_is_not_found(
        self, manager_client, owner, restaurant, second_restaurant, coca_cola_order
    ):
        elsewhere = Product.objects.create(restaurant=second_restaurant, name='Coca-Cola', type='drink', price=500)
        Stock.objects.create(product=elsewhere, quantity=50)

        response = manager_client.post(URL, coca_cola_order(restaurant.id, elsewhere.id), format='json')

        assert response.status_code == 404
        assert_nothing_written()
        assert stock_of(elsewhere) == 50


# ── Payload validation ────────────────────────────────────────

class TestOrderValidation:
    def test_empty_items(self, manager_client, restaurant, coca_cola_order):
        payload = coca_cola_order(restaurant.id)
        payload['items'] = []

        response = manager_client.post(URL, payload, format='json')

        assert response.status_code == 400
        assert response.json()['code'] == 'invalid_order'
        assert_nothing_written()

    def test_body_that_is_not_an_object(self, manager_client):
        response = manager_client.post(URL, [1, 2], format='json')

        assert response.status_code == 400
        assert response.json()['code'] == 'invalid_order'
        assert_nothing_written()

    @pytest.mark.parametrize('items', ['Coca-Cola', [1, 2], {'name': 'Coca-Cola'}])
    def test_items_that_are_not_a_list_of_lines(self, manager_client, restaurant, coca_cola_order, items):
        payload = coca_cola_order(restaurant.id)
        payload['items'] = items

        response = manager_client.post(URL, payload, format='json')

        assert response.status_code == 400
        assert response.json()['code'] == 'invalid_order'
        assert_nothing_written()

    def test_declared_total_must_match_items(self, manager_client, restaurant, coca_cola, coca_cola_order):
        payload = coca_cola_order(restaurant.id, coca_cola.id)
        payload['total_amount'] = 1000

        response = manager_client.post(URL, payload, format='json')

        assert response.status_code == 400
        assert response.json()['code'] == 'invalid_order'
        assert 'total_amount' in response.json()['details']
        assert stock_of(coca_cola) == 50

    def test_declared_total_check_can_be_disabled(
        self, manager_client, restaurant, coca_cola, coca_cola_order, settings
    ):
        settings.RESTAURANTPRO = {**settings.RESTAURANTPRO, 'ENFORCE_DECLARED_TOTAL': False}
        payload = coca_cola_order(restaurant.id, coca_cola.id)
        payload['total_amount'] = 1000

        response = manager_client.post(URL, payload, format='json')

        assert response.status_code == 201
        assert Order.objects.get().total_amount == 1000

    def test_line_total_must_equal_quantity_times_price(
        self, manager_client, restaurant, coca_cola, coca_cola_order
    ):
        payload = coca_cola_order(restaurant.id, coca_cola.id)
        payload['items'][0]['total_price'] = 1400

        response = manager_client.post(URL, payload, format='json')

        assert response.status_code == 400
        assert response.json()['code'] == 'invalid_order'
        assert_nothing_written()

    @pytest.mark.parametrize('change', [
        {'quantity': 0},
        {'unit_price': -1},
        {'type': 'dessert'},
        {'name': ''},
    ])
    def test_malformed_line(self, manager_client, restaurant, coca_cola_order, change):
        payload = coca_cola_order(restaurant.id)
        payload['items'][0].update(change)
        payload['items'][0].pop('total_price')

        response = manager_client.post(URL, payload, format='json')

        assert response.status_code == 400
        assert_nothing_written()

    def test_unknown_payment_method(self, manager_client, restaurant, coca_cola_order):
        response = manager_client.post(
            URL, coca_cola_order(restaurant.id, payment_method='credit'), format='json'
        )

        assert response.status_code == 400
        assert_nothing_written()

    def test_type_mismatch_with_catalog_product(self, manager_client, restaurant, coca_cola, coca_cola_order):
        payload = coca_cola_order(restaurant.id, coca_cola.id)
        payload['items'][0]['type'] = 'dish'

        response = manager_client.post(URL, payload, format='json')

        assert response.status_code == 400
        assert response.json()['code'] == 'invalid_order'
        assert_nothing_written()


# ── Stock shortage and rollback ───────────────────────────────

class TestOrderAtomicity:
    def test_insufficient_stock_rolls_back_every_line(self, manager_client, restaurant, dish, coca_cola):
        payload = {
            'restaurant_id': restaurant.id,
            'payment_method': 'cash',
            'total_amount': 2500 + 500 * 60,
            'items': [
                {'product_id': dish.id, 'name': dish.name, 'type': 'dish', 'quantity': 1, 'unit_price': 2500},
                {'product_id': coca_cola.id, 'name': 'Coca-Cola', 'type': 'drink', 'quantity': 60,
                 'unit_price': 500},
            ],
        }

        response = manager_client.post(URL, payload, format='json')

        assert response.status_code == 400
        assert response.json()['code'] == 'insufficient_stock'
        assert_nothing_written()
        assert stock_of(coca_cola) == 50

    def test_exact_stock_can_be_sold(self, manager, restaurant, coca_cola):
        place_order(manager, restaurant.id, [
            {'product_id': coca_cola.id, 'name': 'Coca-Cola', 'type': 'drink', 'quantity': 50, 'unit_price': 500},
        ], 'cash', 25000)

        assert stock_of(coca_cola) == 0
        with pytest.raises(InsufficientStock):
            place_order(manager, restaurant.id, [
                {'product_id': coca_cola.id, 'name': 'Coca-Cola', 'type': 'drink', 'quantity': 1,
                 'unit_price': 500},
            ], 'cash', 500)
        assert Order.objects.count() == 1

    def test_second_line_exhausting_stock_undoes_the_first(self, manager, restaurant, coca_cola):
        item = {'product_id': coca_cola.id, 'name': 'Coca-Cola', 'type': 'drink', 'quantity': 30, 'unit_price': 500}

        with pytest.raises(InsufficientStock):
            place_order(manager, restaurant.id, [item, item], 'cash', 30000)

        assert stock_of(coca_cola) == 50
        assert_nothing_written()

    def test_store_failure_mid_order_persists_nothing(self, manager_client, restaurant, coca_cola, coca_cola_order):
        with mock.patch.object(StockMovement.objects, 'create', side_effect=DatabaseError('disk full')):
            response = manager_client.post(URL, coca_cola_order(restaurant.id, coca_cola.id), format='json')

        assert response.status_code == 500
        assert response.json()['code'] == 'store_error'
        assert_nothing_written()
        assert stock_of(coca_cola) == 50

    def test_store_failure_undoes_products_created_on_the_fly(self, manager, restaurant, coca_cola_order):
        items = coca_cola_order(restaurant.id)['items']

        with mock.patch.object(StockMovement.objects, 'create', side_effect=DatabaseError('disk full')):
            with pytest.raises(DatabaseError):
                place_order(manager, restaurant.id, items, 'cash', 1500)

        assert not Product.objects.exists()
        assert not Stock.objects.exists()
        assert_nothing_written()


# ── Interleaved sales ─────────────────────────────────────────

@pytest.mark.django_db(transaction=True)
class TestInterleavedSales:
    ITEM_QUANTITY = 3

    def order_item(self, product):
        return {'product_id': product.id, 'name': product.name, 'type': 'drink',
                'quantity': self.ITEM_QUANTITY, 'unit_price': 500}

    def test_sale_committed_mid_order_is_not_lost(self, manager, restaurant, coca_cola):
        create_item = OrderItem.objects.create
        competing = []

        def create_then_sell_elsewhere(**kwargs):
            line = create_item(**kwargs)
            if not competing:
                competing.append(decrement_stock(coca_cola, 7, user=manager))
            return line

        with mock.patch.object(OrderItem.objects, 'create', side_effect=create_then_sell_elsewhere):
            place_order(manager, restaurant.id, [self.order_item(coca_cola)], 'cash', 1500)

        assert stock_of(coca_cola) == 50 - 7 - self.ITEM_QUANTITY
        movements = StockMovement.objects.order_by('id')
        assert [(m.quantity_before, m.quantity_after) for m in movements] == [(50, 43), (43, 40)]

    def test_sales_from_stale_snapshots_all_apply(self, manager, coca_cola):
        quantities = [3, 5, 2, 7, 4, 6]
        snapshots = [Stock.objects.get(product=coca_cola) for _ in quantities]

        for snapshot, quantity in zip(snapshots, quantities):
            assert snapshot.quantity == 50
            decrement_stock(snapshot.product, quantity, user=manager)

        assert stock_of(coca_cola) == 50 - sum(quantities)
        movements = list(StockMovement.objects.filter(product=coca_cola).order_by('id'))
        assert len(movements) == len(quantities)
        assert all(m.quantity_before - m.quantity_after == q for m, q in zip(movements, quantities))
        assert all(prev.quantity_after == nxt.quantity_before for prev, nxt in zip(movements, movements[1:]))

    def test_stale_snapshot_cannot_oversell(self, manager, coca_cola):
        stale = Stock.objects.get(product=coca_cola)
        decrement_stock(coca_cola, 48, user=manager)

        assert stale.quantity == 50
        with pytest.raises(InsufficientStock):
            decrement_stock(stale.product, 3, user=manager)

        assert stock_of(coca_cola) == 2
        assert StockMovement.objects.count() == 1


# ── Product resolution ────────────────────────────────────────

class TestProductResolution:
    def test_always_create_makes_a_product_per_line(self, manager_client, restaurant, coca_cola_order):
        manager_client.post(URL, coca_cola_order(restaurant.id), format='json')
        manager_client.post(URL, coca_cola_order(restaurant.id), format='json')

        products = Product.objects.filter(restaurant=restaurant, name='Coca-Cola')
        assert products.count() == 2
        for product in products:
            assert product.drink_category == 'plastic_small'
            assert stock_of(product) == 47
            assert product.stock.min_threshold == 10

    def test_reuse_existing_from_settings(self, manager_client, restaurant, coca_cola, coca_cola_order, settings):
        settings.RESTAURANTPRO = {**settings.RESTAURANTPRO, 'PRODUCT_RESOLUTION': 'reuse_existing'}

        manager_client.post(URL, coca_cola_order(restaurant.id), format='json')
        manager_client.post(URL, coca_cola_order(restaurant.id), format='json')

        assert Product.objects.filter(restaurant=restaurant).count() == 1
        assert stock_of(coca_cola) == 44

    def test_reuse_existing_creates_when_nothing_matches(self, manager, restaurant, coca_cola, coca_cola_order):
        items = coca_cola_order(restaurant.id)['items']
        items[0]['unit_price'] = 600
        items[0]['total_price'] = 1800

        place_order(manager, restaurant.id, items, 'cash', 1800, strategy='reuse_existing')

        assert Product.objects.filter(restaurant=restaurant, name='Coca-Cola').count() == 2
        assert stock_of(coca_cola) == 50

    def test_large_order_of_a_new_drink_is_accepted(self, manager_client, restaurant, coca_cola_order):
        response = manager_client.post(URL, coca_cola_order(restaurant.id, quantity=60), format='json')

        assert response.status_code == 201
        product = Product.objects.get(restaurant=restaurant, name='Coca-Cola')
        assert stock_of(product) == 0
        movement = StockMovement.objects.get(product=product)
        assert (movement.quantity_before, movement.quantity_after) == (60, 0)

    def test_dish_created_on_the_fly_has_no_stock(self, manager, restaurant):
        place_order(manager, restaurant.id, [
            {'name': 'Yassa poulet', 'type': 'dish', 'quantity': 1, 'unit_price': 2700,
             'drink_category': 'glass_small'},
        ], 'cash', 2700)

        product = Product.objects.get(name='Yassa poulet')
        assert product.drink_category is None
        assert not Stock.objects.filter(product=product).exists()


# ── Listing and detail ────────────────────────────────────────

class TestOrderQueries:
    @pytest.fixture
    def two_orders(self, manager, restaurant, coca_cola):
        item = {'product_id': coca_cola.id, 'name': 'Coca-Cola', 'type': 'drink', 'quantity': 1, 'unit_price': 500}
        cash = place_order(manager, restaurant.id, [item], 'cash', 500)
        electronic = place_order(manager, restaurant.id, [item], 'electronic', 500)
        return cash, electronic

    def test_list_is_paginated(self, manager_client, restaurant, two_orders):
        response = manager_client.get(f'{URL}restaurant/{restaurant.id}/', {'limit': 1})

        assert response.status_code == 200
        body = response.json()
        assert body['count'] == 2
        assert len(body['results']) == 1
        assert body['next']

    def test_list_newest_first(self, manager_client, restaurant, two_orders):
        cash, electronic = two_orders

        results = manager_client.get(f'{URL}restaurant/{restaurant.id}/').json()['results']

        assert [row['id'] for row in results] == [electronic.id, cash.id]
        assert results[0]['items_count'] == 1
        assert results[0]['items_summary'] == 'Coca-Cola (1)'
        assert results[0]['manager_name'] == 'gerant1'

    def test_filter_by_payment_method(self, manager_client, restaurant, two_orders):
        body = manager_client.get(f'{URL}restaurant/{restaurant.id}/', {'payment_method': 'cash'}).json()

        assert body['count'] == 1
        assert body['results'][0]['payment_method'] == 'cash'

    def test_filter_by_date(self, owner_client, restaurant, two_orders):
        cash, _ = two_orders
        Order.objects.filter(id=cash.id).update(created_at=timezone.now() - timedelta(days=1))
        today = timezone.localdate().isoformat()

        body = owner_client.get(f'{URL}restaurant/{restaurant.id}/', {'date': today}).json()

        assert body['count'] == 1

    def test_list_of_another_restaurant_is_forbidden(self, second_manager_client, restaurant, two_orders):
        response = second_manager_client.get(f'{URL}restaurant/{restaurant.id}/')

        assert response.status_code == 403

    def test_detail_includes_items(self, owner_client, two_orders):
        cash, _ = two_orders

        response = owner_client.get(f'{URL}{cash.id}/')

        assert response.status_code == 200
        body = response.json()
        assert body['restaurant_name'] == 'Restaurant Central'
        assert body['items'][0]['quantity'] == 1

    def test_detail_is_scoped_to_the_caller(self, second_manager_client, other_owner_client, two_orders):
        cash, _ = two_orders

        assert second_manager_client.get(f'{URL}{cash.id}/').status_code == 404
        assert other_owner_client.get(f'{URL}{cash.id}/').status_code == 404
