from django.urls import path
from .views import (
    session_list_create, session_detail, session_add_item,
    item_detail, item_identify, item_price_override,
)

urlpatterns = [
    path('inspections/sessions/', session_list_create, name='inspection-session-list-create'),
    path('inspections/sessions/<int:pk>/', session_detail, name='inspection-session-detail'),
    path('inspections/sessions/<int:pk>/items/', session_add_item, name='inspection-session-add-item'),
    path('inspections/items/<int:pk>/', item_detail, name='inspection-item-detail'),
    path('inspections/items/<int:pk>/identify/', item_identify, name='inspection-item-identify'),
    path('inspections/items/<int:pk>/price-override/', item_price_override, name='inspection-item-price-override'),
]
