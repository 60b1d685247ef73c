from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models


class Period(models.TextChoices):
    MORNING = 'morning', 'Morning'
    EVENING = 'evening', 'Evening'
    BOTH = 'both', 'Both'


MAX_PEOPLE = 60
# Upper bound of the 32-bit integer amount columns.
MAX_AMOUNT = 2147483647


class Booking(models.Model):
    booking_date = models.DateField(db_index=True)
    period = models.CharField(max_length=10, choices=Period.choices)
    customer_name = models.CharField(max_length=255)
    customer_phone = models.CharField(max_length=50)
    amount_paid = models.IntegerField(validators=[MinValueValidator(0)])
    amount_remaining = models.IntegerField(validators=[MinValueValidator(0)])
    people_count = models.PositiveSmallIntegerField(
        validators=[MinValueValidator(1), MaxValueValidator(MAX_PEOPLE)]
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'bookings_booking'
        ordering = ['booking_date', 'id']

    def __str__(self):
        return f"{self.customer_name} - {self.booking_date} - {self.period}"


class BookingDay(models.Model):
    """Lock row for a calendar date, held while a write is checked and committed."""

    date = models.DateField(unique=True)

    class Meta:
        db_table = 'bookings_day'

    def __str__(self):
        return str(self.date)
