import django_filters

from .models import Order


class OrderFilter(django_filters.FilterSet):
    date = django_filters.DateFilter(field_name='created_at', lookup_expr='date')
    payment_method = django_filters.ChoiceFilter(choices=Order.PAYMENT_METHOD_CHOICES)

    class Meta:
        model = Order
        fields = ['date', 'payment_method']
