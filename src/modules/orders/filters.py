import django_filters
from django.db.models import Q

from modules.orders.constants import OrderStatus
from modules.orders.models import Order


class OrderFilter(django_filters.FilterSet):
    status = django_filters.ChoiceFilter(choices=OrderStatus.choices)
    contact = django_filters.CharFilter(method="filter_contact")

    class Meta:
        model = Order
        fields = ["status", "contact"]

    def filter_contact(self, queryset, name, value):
        return queryset.filter(
            Q(email__icontains=value)
            | Q(phone__icontains=value)
            | Q(customer_name__icontains=value)
        )
