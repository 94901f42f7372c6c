from django.contrib import admin
from .models import ConsignmentChangeRequest


@admin.register(ConsignmentChangeRequest)
class ConsignmentChangeRequestAdmin(admin.ModelAdmin):
    list_display = ['equipment', 'client', 'current_payout', 'proposed_payout', 'client_adjusted_payout', 'status', 'created_at']
    list_filter = ['status']
    search_fields = ['equipment__sku', 'equipment__name', 'client__first_name', 'client__surname']
    readonly_fields = ['token', 'client_confirmed_at', 'client_declined_at', 'created_at', 'updated_at']
