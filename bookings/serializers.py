from rest_framework import serializers

from .models import MAX_AMOUNT, MAX_PEOPLE, Booking, Period


class BookingSerializer(serializers.ModelSerializer):
    bookingDate = serializers.DateField(source='booking_date')
    period = serializers.ChoiceField(choices=Period.choices)
    customerName = serializers.CharField(source='customer_name', min_length=2, max_length=255)
    customerPhone = serializers.CharField(source='customer_phone', min_length=9, max_length=50)
    amountPaid = serializers.IntegerField(source='amount_paid', min_value=0, max_value=MAX_AMOUNT)
    amountRemaining = serializers.IntegerField(source='amount_remaining', min_value=0, max_value=MAX_AMOUNT)
    peopleCount = serializers.IntegerField(source='people_count', min_value=1, max_value=MAX_PEOPLE)
    createdAt = serializers.DateTimeField(source='created_at', read_only=True)

    class Meta:
        model = Booking
        fields = [
            'id',
            'bookingDate',
            'period',
            'customerName',
            'customerPhone',
            'amountPaid',
            'amountRemaining',
            'peopleCount',
            'createdAt',
        ]
        read_only_fields = ['id']
