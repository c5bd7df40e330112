"""
Read-only sales aggregation.

Amounts stay Decimal end to end so ``cash + electronic == total`` holds
exactly; the JSON renderer turns them into numbers.
"""
import datetime
from decimal import Decimal, ROUND_HALF_UP

from django.db.models import Count, DecimalField, Q, Sum, Value
from django.db.models.functions import Coalesce
from django.utils import timezone

from authentication.exceptions import InvalidRequest
from authentication.models import Restaurant, User
from authentication.services import get_accessible_restaurant, require_role
from orders.models import Order, OrderItem

ZERO = Decimal('0.00')
CENT = Decimal('0.01')


def parse_report_date(value):
    if value in (None, ''):
        return timezone.localdate()
    if isinstance(value, datetime.date):
        return value
    try:
        return datetime.date.fromisoformat(str(value))
    except ValueError:
        raise InvalidRequest('date must be formatted as YYYY-MM-DD')


def _money(value):
    return (value or ZERO).quantize(CENT, rounding=ROUND_HALF_UP)


def _percentage(part, whole):
    if not whole:
        return 0.0
    return round(float(part * 100 / whole), 2)


def daily_report(caller, restaurant_id, date=None):
    """
    Line items of every order placed at ``restaurant_id`` on ``date``
    (today by default), with totals by payment method and summary stats.
    A day without orders is an empty report, not an error.
    """
    restaurant = get_accessible_restaurant(caller, restaurant_id)
    report_date = parse_report_date(date)

    lines = OrderItem.objects.filter(
        order__restaurant=restaurant,
        order__created_at__date=report_date,
    ).select_related('order', 'order__manager', 'product').order_by('order__created_at', 'order_id', 'id')

    line_items = []
    totals = {Order.CASH: ZERO, Order.ELECTRONIC: ZERO}
    order_ids = set()
    total_items = 0

    for line in lines:
        order = line.order
        order_ids.add(order.id)
        total_items += line.quantity
        totals[order.payment_method] += line.total_price

        line_items.append({
            'id': order.id,
            'order_number': order.order_number,
            'created_at': order.created_at,
            'payment_method': order.payment_method,
            'total_amount': order.total_amount,
            'quantity': line.quantity,
            'unit_price': line.unit_price,
            'total_price': line.total_price,
            'product_name': line.product.name,
            'product_type': line.product.type,
            'drink_category': line.product.drink_category,
            'manager_name': order.manager.username if order.manager else None,
        })

    cash_total = _money(totals[Order.CASH])
    electronic_total = _money(totals[Order.ELECTRONIC])
    grand_total = cash_total + electronic_total
    order_count = len(order_ids)

    return {
        'date': report_date.isoformat(),
        'restaurant_id': restaurant.id,
        'restaurant_name': restaurant.name,
        'orders': line_items,
        'totals': {
            'cash': cash_total,
            'electronic': electronic_total,
            'total': grand_total,
        },
        'statistics': {
            'total_orders': order_count,
            'total_items': total_items,
            'average_order_value': _money(grand_total / max(order_count, 1)),
            'cash_percentage': _percentage(cash_total, grand_total),
            'electronic_percentage': _percentage(electronic_total, grand_total),
        },
    }


def _revenue(filter_q):
    return Coalesce(
        Sum('orders__items__total_price', filter=filter_q),
        Value(ZERO),
        output_field=DecimalField(max_digits=14, decimal_places=2),
    )


def consolidated_report(owner, date=None):
    """
    Per-restaurant revenue for every restaurant ``owner`` owns, highest first.

    Revenue is summed from line totals, as in ``daily_report``, so both
    reports agree even when a declared order total differs from its lines.
    """
    require_role(owner, [User.OWNER])
    report_date = parse_report_date(date)

    on_day = Q(orders__created_at__date=report_date)
    restaurants = Restaurant.objects.filter(owner=owner).annotate(
        total_orders=Count('orders', filter=on_day, distinct=True),
        total_revenue=_revenue(on_day),
        cash_revenue=_revenue(on_day & Q(orders__payment_method=Order.CASH)),
        electronic_revenue=_revenue(on_day & Q(orders__payment_method=Order.ELECTRONIC)),
    ).order_by('-total_revenue', 'name')

    rows = []
    global_totals = {
        'total_orders': 0,
        'total_revenue': ZERO,
        'cash_revenue': ZERO,
        'electronic_revenue': ZERO,
    }
    for restaurant in restaurants:
        row = {
            'id': restaurant.id,
            'name': restaurant.name,
            'location': restaurant.location,
            'total_orders': restaurant.total_orders,
            'total_revenue': _money(restaurant.total_revenue),
            'cash_revenue': _money(restaurant.cash_revenue),
            'electronic_revenue': _money(restaurant.electronic_revenue),
        }
        row['average_order_value'] = _money(row['total_revenue'] / max(row['total_orders'], 1))
        rows.append(row)

        for key in global_totals:
            global_totals[key] += row[key]

    return {
        'date': report_date.isoformat(),
        'owner_id': owner.id,
        'restaurants': rows,
        'global_totals': global_totals,
    }
