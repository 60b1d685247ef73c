from django.contrib import admin
from .models import Booking


@admin.register(Booking)
class BookingAdmin(admin.ModelAdmin):
    list_display = ['id', 'booking_date', 'period', 'customer_name', 'customer_phone', 'people_count', 'balance_display', 'created_at']
    list_filter = ['period', 'booking_date']
    search_fields = ['customer_name', 'customer_phone']
    readonly_fields = ['created_at']
    date_hierarchy = 'booking_date'

    def balance_display(self, obj):
        return f"{obj.amount_paid} paid / {obj.amount_remaining} due"
    balance_display.short_description = 'Balance'
