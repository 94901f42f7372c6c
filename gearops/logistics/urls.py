from django.urls import path
from .views import (
    delivery_booking_list_create, delivery_booking_detail, availability_list_create, availability_detail,
)

urlpatterns = [
    path('delivery-bookings/', delivery_booking_list_create, name='delivery-booking-list-create'),
    path('delivery-bookings/<int:pk>/', delivery_booking_detail, name='delivery-booking-detail'),
    path('calendar/availability/', availability_list_create, name='availability-list-create'),
    path('calendar/availability/<int:pk>/', availability_detail, name='availability-detail'),
]
