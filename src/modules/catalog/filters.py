import django_filters

from modules.catalog.models import MenuItem


class MenuItemFilter(django_filters.FilterSet):
    name = django_filters.CharFilter(field_name="name", lookup_expr="icontains")
    category = django_filters.CharFilter(field_name="category", lookup_expr="iexact")
    available = django_filters.BooleanFilter(field_name="available")
    min_price = django_filters.NumberFilter(field_name="price_full", lookup_expr="gte")
    max_price = django_filters.NumberFilter(field_name="price_full", lookup_expr="lte")

    class Meta:
        model = MenuItem
        fields = ["name", "category", "available", "min_price", "max_price"]
