from django.urls import path
from .views import product_list_create, product_detail, product_accessories, accessory_detail

urlpatterns = [
    path('products/', product_list_create, name='product-list-create'),
    path('products/<int:pk>/', product_detail, name='product-detail'),
    path('products/<int:pk>/accessories/', product_accessories, name='product-accessories'),
    path('accessories/<int:pk>/', accessory_detail, name='accessory-detail'),
]
