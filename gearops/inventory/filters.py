import django_filters
from django.db.models import Q
from .models import Equipment


class EquipmentFilter(django_filters.FilterSet):
    q = django_filters.CharFilter(method='filter_search')
    status = django_filters.ChoiceFilter(choices=Equipment.STATUS_CHOICES)
    acquisition_type = django_filters.ChoiceFilter(choices=Equipment.ACQUISITION_CHOICES)
    intake_status = django_filters.ChoiceFilter(choices=Equipment.INTAKE_CHOICES)
    vendor = django_filters.NumberFilter(field_name='vendor_id')
    client = django_filters.NumberFilter(field_name='client_id')
    in_repair = django_filters.BooleanFilter()

    class Meta:
        model = Equipment
        fields = ['status', 'acquisition_type', 'intake_status', 'vendor', 'client', 'in_repair']

    def filter_search(self, queryset, name, value):
        value = value.strip()
        if not value:
            return queryset
        return queryset.filter(
            Q(sku__icontains=value) | Q(name__icontains=value) | Q(brand__icontains=value)
            | Q(model__icontains=value) | Q(serial_number__icontains=value)
        )
