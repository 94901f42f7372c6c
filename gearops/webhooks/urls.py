from django.urls import path
from .views import (
    quote_accepted_webhook, webhook_event_list, webhook_event_summary, webhook_event_detail,
    webhook_event_ignore, webhook_event_replay,
)

urlpatterns = [
    path('webhooks/quote-accepted/', quote_accepted_webhook, name='webhook-quote-accepted'),
    path('admin/webhooks/', webhook_event_list, name='webhook-event-list'),
    path('admin/webhooks/summary/', webhook_event_summary, name='webhook-event-summary'),
    path('admin/webhooks/<int:pk>/', webhook_event_detail, name='webhook-event-detail'),
    path('admin/webhooks/<int:pk>/ignore/', webhook_event_ignore, name='webhook-event-ignore'),
    path('admin/webhooks/<int:pk>/replay/', webhook_event_replay, name='webhook-event-replay'),
]
