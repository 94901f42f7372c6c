from django.urls import path
from .views import (
    change_request_list_create, change_request_detail, review_change, confirm_change, decline_change,
)

urlpatterns = [
    path('consignment/requests/', change_request_list_create, name='consignment-request-list-create'),
    path('consignment/requests/<int:pk>/', change_request_detail, name='consignment-request-detail'),
    path('consignment/review/<str:token>/', review_change, name='consignment-review'),
    path('consignment/review/<str:token>/confirm/', confirm_change, name='consignment-confirm'),
    path('consignment/review/<str:token>/decline/', decline_change, name='consignment-decline'),
]
