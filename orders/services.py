"""
Order placement.

An order is written as one unit: header, line items, products created on
the fly and the stock effects of every drink either all persist or none do.
"""
import logging

from django.db import transaction

from authentication.exceptions import InvalidOrder
from authentication.services import get_accessible_restaurant
from inventory.services import decrement_stock, resolve_product
from .models import Order, OrderItem
from .serializers import OrderCreateSerializer

logger = logging.getLogger(__name__)


def place_order(caller, restaurant_id, items, payment_method, declared_total, strategy=None):
    """
    Record an order for ``restaurant_id`` on behalf of ``caller``.

    Authorization and payload checks run before anything is written. Raises
    Forbidden, NotFound, InvalidOrder or InsufficientStock; any store
    failure after the header insert rolls the whole order back.
    """
    restaurant = get_accessible_restaurant(caller, restaurant_id)

    payload = OrderCreateSerializer(data={
        'items': items,
        'payment_method': payment_method,
        'total_amount': declared_total,
    })
    if not payload.is_valid():
        raise InvalidOrder(payload.errors)
    data = payload.validated_data

    # Catalog products named by id are checked up front
    known_products = {
        item['product_id']: resolve_product(restaurant, item)
        for item in data['items']
        if item.get('product_id') is not None
    }

    with transaction.atomic():
        order = Order.objects.create(
            restaurant=restaurant,
            manager=caller,
            total_amount=data['total_amount'],
            payment_method=data['payment_method'],
        )

        for item in data['items']:
            product = known_products.get(item.get('product_id'))
            if product is None:
                product = resolve_product(restaurant, item, strategy)

            OrderItem.objects.create(
                order=order,
                product=product,
                quantity=item['quantity'],
                unit_price=item['unit_price'],
                total_price=item['total_price'],
            )

            if product.is_stock_tracked:
                decrement_stock(
                    product,
                    item['quantity'],
                    user=caller,
                    order=order,
                    notes=f"Sale for order {order.order_number}",
                )

    logger.info(
        f"Order placed: order_id={order.id} order_number={order.order_number} "
        f"restaurant_id={restaurant.id} caller_id={caller.id} total={order.total_amount}"
    )
    return order
