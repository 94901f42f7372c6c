from django.urls import path
from .views import (
    equipment_list_create, equipment_detail, equipment_update_price, equipment_complete_intake,
    equipment_validate_sku, equipment_recommend_price, repair_list_create, repair_detail,
    bundle_list_create, bundle_detail, bundle_remove_item,
)

urlpatterns = [
    path('equipment/', equipment_list_create, name='equipment-list-create'),
    path('equipment/validate-sku/', equipment_validate_sku, name='equipment-validate-sku'),
    path('equipment/recommend-price/', equipment_recommend_price, name='equipment-recommend-price'),
    path('equipment/<int:pk>/', equipment_detail, name='equipment-detail'),
    path('equipment/<int:pk>/price/', equipment_update_price, name='equipment-update-price'),
    path('equipment/<int:pk>/complete-intake/', equipment_complete_intake, name='equipment-complete-intake'),
    path('repairs/', repair_list_create, name='repair-list-create'),
    path('repairs/<int:pk>/', repair_detail, name='repair-detail'),
    path('bundles/', bundle_list_create, name='bundle-list-create'),
    path('bundles/<int:pk>/', bundle_detail, name='bundle-detail'),
    path('bundles/<int:pk>/remove-item/', bundle_remove_item, name='bundle-remove-item'),
]
