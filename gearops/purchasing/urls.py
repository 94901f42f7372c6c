from django.urls import path
from .views import (
    incoming_gear_list_create, incoming_gear_detail, incoming_gear_item_detail, send_quote,
    mark_received, undo_received, notify_client, start_inspection, send_final_quote,
    approve_purchase, approve_for_payment, mark_paid, create_walk_in,
    quote_view, quote_inspection, quote_accept, quote_decline, quote_delivery, quote_tracking,
    quote_select_products, quote_submit_details, invoice_view,
)

urlpatterns = [
    path('incoming-gear/', incoming_gear_list_create, name='incoming-gear-list-create'),
    path('incoming-gear/walk-in/', create_walk_in, name='incoming-gear-walk-in'),
    path('incoming-gear/items/<int:pk>/', incoming_gear_item_detail, name='incoming-gear-item-detail'),
    path('incoming-gear/<int:pk>/', incoming_gear_detail, name='incoming-gear-detail'),
    path('incoming-gear/<int:pk>/send-quote/', send_quote, name='incoming-gear-send-quote'),
    path('incoming-gear/<int:pk>/mark-received/', mark_received, name='incoming-gear-mark-received'),
    path('incoming-gear/<int:pk>/undo-received/', undo_received, name='incoming-gear-undo-received'),
    path('incoming-gear/<int:pk>/notify-client/', notify_client, name='incoming-gear-notify-client'),
    path('incoming-gear/<int:pk>/start-inspection/', start_inspection, name='incoming-gear-start-inspection'),
    path('incoming-gear/<int:pk>/send-final-quote/', send_final_quote, name='incoming-gear-send-final-quote'),
    path('incoming-gear/<int:pk>/approve/', approve_purchase, name='incoming-gear-approve'),
    path('incoming-gear/<int:pk>/approve-for-payment/', approve_for_payment, name='incoming-gear-approve-for-payment'),
    path('incoming-gear/<int:pk>/mark-paid/', mark_paid, name='incoming-gear-mark-paid'),

    # Public links
    path('quote/<str:token>/', quote_view, name='quote-view'),
    path('quote/<str:token>/inspection/', quote_inspection, name='quote-inspection'),
    path('quote/<str:token>/accept/', quote_accept, name='quote-accept'),
    path('quote/<str:token>/decline/', quote_decline, name='quote-decline'),
    path('quote/<str:token>/delivery/', quote_delivery, name='quote-delivery'),
    path('quote/<str:token>/tracking/', quote_tracking, name='quote-tracking'),
    path('quote/<str:token>/select-products/', quote_select_products, name='quote-select-products'),
    path('quote/<str:token>/submit-details/', quote_submit_details, name='quote-submit-details'),
    path('invoice/<str:invoice_token>/', invoice_view, name='invoice-view'),
]
