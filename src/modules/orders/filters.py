import django_filters

from modules.orders.constants import DeliveryType, OrderStatus
from modules.orders.models import Order


class OrderFilter(django_filters.FilterSet):
    status = django_filters.ChoiceFilter(choices=OrderStatus.choices)
    status_in = django_filters.MultipleChoiceFilter(
        field_name="status", choices=OrderStatus.choices
    )
    delivery_type = django_filters.ChoiceFilter(choices=DeliveryType.choices)
    delivery_person = django_filters.UUIDFilter(field_name="delivery_person_id")
    start_date = django_filters.DateFilter(field_name="created_at", lookup_expr="date__gte")
    end_date = django_filters.DateFilter(field_name="created_at", lookup_expr="date__lte")
    min_total = django_filters.NumberFilter(
        field_name="total_amount", lookup_expr="gte"
    )
    max_total = django_filters.NumberFilter(
        field_name="total_amount", lookup_expr="lte"
    )

    class Meta:
        model = Order
        fields = [
            "status",
            "status_in",
            "delivery_type",
            "delivery_person",
            "start_date",
            "end_date",
            "min_total",
            "max_total",
        ]
