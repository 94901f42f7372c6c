from django.urls import path
from .views import (
    vendor_list_create, vendor_detail,
    client_list_create, client_detail, client_merge,
)

urlpatterns = [
    # Vendor endpoints
    path('vendors/', vendor_list_create, name='vendor-list-create'),
    path('vendors/<int:pk>/', vendor_detail, name='vendor-detail'),

    # Client endpoints
    path('clients/', client_list_create, name='client-list-create'),
    path('clients/merge/', client_merge, name='client-merge'),
    path('clients/<int:pk>/', client_detail, name='client-detail'),
]
