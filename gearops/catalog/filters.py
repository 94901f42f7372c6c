import django_filters
from django.db.models import Q
from .models import Product, PRODUCT_TYPE_CHOICES


class ProductFilter(django_filters.FilterSet):
    q = django_filters.CharFilter(method='filter_search')
    brand = django_filters.CharFilter(field_name='brand', lookup_expr='iexact')
    product_type = django_filters.ChoiceFilter(choices=PRODUCT_TYPE_CHOICES)
    is_active = django_filters.BooleanFilter()

    class Meta:
        model = Product
        fields = ['brand', 'product_type', 'is_active']

    def filter_search(self, queryset, name, value):
        """Every word must appear in the name, brand or model"""
        for term in value.split():
            queryset = queryset.filter(
                Q(name__icontains=term) | Q(brand__icontains=term) | Q(model__icontains=term)
            )
        return queryset
