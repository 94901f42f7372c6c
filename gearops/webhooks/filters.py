import django_filters
from django.db.models import Q
from .models import WebhookEventLog


class WebhookEventFilter(django_filters.FilterSet):
    status = django_filters.CharFilter(method='filter_status')
    eventType = django_filters.CharFilter(field_name='event_type')
    q = django_filters.CharFilter(method='filter_search')

    class Meta:
        model = WebhookEventLog
        fields = ['status', 'eventType']

    def filter_status(self, queryset, name, value):
        if not value or value == 'ALL':
            return queryset
        return queryset.filter(status=value)

    def filter_search(self, queryset, name, value):
        """Event id, or the customer's phone, email or name inside the payload"""
        value = value.strip()
        if not value:
            return queryset
        query = Q(event_id__icontains=value)
        for key in ('customerPhone', 'customerEmail', 'customerName'):
            query |= Q(**{f'raw_payload__payload__{key}__icontains': value})
            query |= Q(**{f'raw_payload__{key}__icontains': value})
        return queryset.filter(query)
