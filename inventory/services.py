"""
Catalog and stock operations.

Every quantity change goes through one of ``decrement_stock``, ``restock``
or ``adjust`` and is paired with a StockMovement row. Callers that need
several changes to land together wrap them in ``transaction.atomic``.
"""
import logging
from decimal import Decimal

from django.conf import settings
from django.db import transaction
from django.db.models import Case, F, IntegerField, When
from django.utils import timezone

from authentication.exceptions import InsufficientStock, InvalidOrder, InvalidStockChange, NotFound
from authentication.models import User

from .models import Product, Stock, StockMovement

logger = logging.getLogger(__name__)


def _conf(key):
    return settings.RESTAURANTPRO[key]


# =============== PRODUCTS ===============

def create_product(restaurant, name, type, price, drink_category=None, initial_stock=0):
    """Create a product; drinks get a Stock row straight away."""
    product = Product.objects.create(
        restaurant=restaurant,
        name=name,
        type=type,
        price=price,
        drink_category=drink_category if type == Product.DRINK else None,
    )
    if product.is_stock_tracked:
        Stock.objects.create(
            product=product,
            quantity=initial_stock,
            min_threshold=_conf('DEFAULT_MIN_THRESHOLD'),
        )
    logger.info(f"Product created: product_id={product.id} restaurant_id={restaurant.id} type={type}")
    return product


def _create_from_item(restaurant, item):
    # A drink first seen on an order must be able to cover that order
    return create_product(
        restaurant,
        name=item['name'],
        type=item['type'],
        price=item['unit_price'],
        drink_category=item.get('drink_category'),
        initial_stock=max(_conf('ORDER_DRINK_INITIAL_STOCK'), item['quantity']),
    )


def always_create(restaurant, item):
    """Every order line without a product id gets a fresh product."""
    return _create_from_item(restaurant, item)


def reuse_existing(restaurant, item):
    """Reuse an active product with the same name, type and price if there is one."""
    product = Product.objects.filter(
        restaurant=restaurant,
        name=item['name'],
        type=item['type'],
        price=item['unit_price'],
        is_active=True,
    ).order_by('id').first()
    if product is not None:
        return product
    return _create_from_item(restaurant, item)


PRODUCT_RESOLUTION_STRATEGIES = {
    'always_create': always_create,
    'reuse_existing': reuse_existing,
}


def get_resolution_strategy(name=None):
    name = name or _conf('PRODUCT_RESOLUTION')
    try:
        return PRODUCT_RESOLUTION_STRATEGIES[name]
    except KeyError:
        raise ValueError(f"Unknown product resolution strategy: {name}")


def resolve_product(restaurant, item, strategy=None):
    """
    Return the product an order line refers to.

    A supplied ``product_id`` must belong to ``restaurant`` and its stored
    type wins over the line's; without one the configured strategy decides.
    """
    product_id = item.get('product_id')
    if product_id is None:
        return get_resolution_strategy(strategy)(restaurant, item)

    try:
        product = Product.objects.get(id=product_id, restaurant=restaurant)
    except Product.DoesNotExist:
        raise NotFound(f"Product {product_id} not found")

    if item.get('type') and item['type'] != product.type:
        raise InvalidOrder(f"Product {product_id} is a {product.type}, not a {item['type']}")
    return product


def get_product_for(user, product_id, owner_only=False):
    """
    Look a product up through the caller's tenancy: managers see their own
    restaurant's products, owners the products of restaurants they own.
    """
    products = Product.objects.select_related('restaurant')
    if user.role == User.OWNER:
        products = products.filter(restaurant__owner=user)
    elif owner_only:
        products = products.none()
    else:
        products = products.filter(restaurant_id=user.restaurant_id)

    try:
        return products.get(id=product_id)
    except (Product.DoesNotExist, ValueError, TypeError):
        raise NotFound('Product not found')


# =============== STOCK CHANGES ===============

def decrement_stock(product, quantity, user=None, order=None, notes=''):
    """
    Remove ``quantity`` units in one conditional UPDATE so concurrent sales
    never lose an update or drive stock below zero.
    """
    updated = Stock.objects.filter(product=product, quantity__gte=quantity).update(
        quantity=F('quantity') - quantity,
        updated_at=timezone.now(),
    )
    if not updated:
        raise InsufficientStock(f"Insufficient stock for {product.name}")

    quantity_after = Stock.objects.values_list('quantity', flat=True).get(product=product)
    return StockMovement.objects.create(
        product=product,
        movement_type=StockMovement.SALE,
        quantity_change=-quantity,
        quantity_before=quantity_after + quantity,
        quantity_after=quantity_after,
        user=user,
        order=order,
        notes=notes,
    )


def _positive_int(value, message):
    if isinstance(value, bool):
        raise InvalidStockChange(message)
    try:
        value = int(value)
    except (TypeError, ValueError):
        raise InvalidStockChange(message)
    if value <= 0:
        raise InvalidStockChange(message)
    return value


@transaction.atomic
def restock(owner, product_id, quantity, notes=None, unit_cost=None):
    quantity = _positive_int(quantity, 'A valid product and a positive quantity are required')
    product = get_product_for(owner, product_id, owner_only=True)

    stock, _ = Stock.objects.select_for_update().get_or_create(
        product=product,
        defaults={'quantity': 0, 'min_threshold': _conf('DEFAULT_MIN_THRESHOLD')},
    )
    changes = {'quantity': F('quantity') + quantity, 'updated_at': timezone.now()}
    if unit_cost is not None:
        changes['unit_cost'] = Decimal(str(unit_cost))
    Stock.objects.filter(pk=stock.pk).update(**changes)
    stock.refresh_from_db()

    movement = StockMovement.objects.create(
        product=product,
        movement_type=StockMovement.RESTOCK,
        quantity_change=quantity,
        quantity_before=stock.quantity - quantity,
        quantity_after=stock.quantity,
        unit_cost=stock.unit_cost,
        user=owner,
        notes=notes or f"Restock of {product.name}",
    )
    logger.info(
        f"Restock: product_id={product.id} owner_id={owner.id} "
        f"{movement.quantity_before} -> {movement.quantity_after}"
    )

    return {
        'product_id': product.id,
        'product_name': product.name,
        'previous_quantity': movement.quantity_before,
        'new_quantity': movement.quantity_after,
        'added_quantity': quantity,
        'is_low_stock': stock.is_low_stock,
        'movement_id': movement.id,
    }


@transaction.atomic
def adjust(owner, product_id, new_quantity, reason=None, notes=None):
    if isinstance(new_quantity, bool):
        raise InvalidStockChange()
    try:
        new_quantity = int(new_quantity)
    except (TypeError, ValueError):
        raise InvalidStockChange()
    if new_quantity < 0:
        raise InvalidStockChange('Stock cannot be set below zero')

    product = get_product_for(owner, product_id, owner_only=True)
    stock, _ = Stock.objects.select_for_update().get_or_create(
        product=product,
        defaults={'quantity': 0, 'min_threshold': _conf('DEFAULT_MIN_THRESHOLD')},
    )
    previous_quantity = stock.quantity
    stock.quantity = new_quantity
    stock.save(update_fields=['quantity', 'updated_at'])

    movement = StockMovement.objects.create(
        product=product,
        movement_type=StockMovement.ADJUSTMENT,
        quantity_change=new_quantity - previous_quantity,
        quantity_before=previous_quantity,
        quantity_after=new_quantity,
        user=owner,
        notes=notes or f"Adjustment: {reason or 'unspecified'}",
    )
    logger.info(
        f"Stock adjusted: product_id={product.id} owner_id={owner.id} "
        f"{previous_quantity} -> {new_quantity}"
    )

    return {
        'product_id': product.id,
        'product_name': product.name,
        'previous_quantity': previous_quantity,
        'new_quantity': new_quantity,
        'change': movement.quantity_change,
        'is_low_stock': stock.is_low_stock,
        'movement_id': movement.id,
    }


# =============== READ MODELS ===============

def stock_levels(restaurant):
    """Active products of a restaurant, low-stock first."""
    return Product.objects.filter(
        restaurant=restaurant, is_active=True
    ).select_related('stock').annotate(
        low_stock=Case(
            When(stock__quantity__lte=F('stock__min_threshold'), then=1),
            default=0,
            output_field=IntegerField(),
        )
    ).order_by('-low_stock', 'type', 'name')


def low_stock_alerts(restaurant):
    stocks = Stock.objects.filter(
        product__restaurant=restaurant,
        product__is_active=True,
        quantity__lte=F('min_threshold'),
    ).select_related('product')
    return sorted(stocks, key=lambda stock: (stock.stock_percentage, stock.product.name))


def product_movements(user, product_id):
    product = get_product_for(user, product_id)
    return StockMovement.objects.filter(product=product).select_related('product', 'user')
