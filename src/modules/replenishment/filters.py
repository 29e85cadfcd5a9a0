import django_filters

from modules.catalog.models import normalize_isbn
from modules.replenishment.models import ReplenishmentRequest


class ReplenishmentRequestFilter(django_filters.FilterSet):
    status = django_filters.CharFilter(field_name="status", lookup_expr="iexact")
    isbn = django_filters.CharFilter(method="filter_isbn")

    class Meta:
        model = ReplenishmentRequest
        fields = ["status", "isbn"]

    def filter_isbn(self, queryset, name, value):
        return queryset.filter(book__isbn=normalize_isbn(value))
