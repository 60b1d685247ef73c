"""Booking operations: conflict checks and conflict-checked writes."""

import calendar
import functools
import logging
from datetime import date

from django.db import DatabaseError, transaction
from django.utils import timezone

from . import availability
from .models import Booking, BookingDay
from .serializers import BookingSerializer

logger = logging.getLogger(__name__)


class BookingError(Exception):
    """Base class for booking operation failures."""


class BookingValidationError(BookingError):
    def __init__(self, errors, message='Invalid booking data'):
        super().__init__(message)
        self.errors = errors


class BookingNotFound(BookingError):
    pass


class BookingConflictError(BookingError):
    pass


class BookingStoreError(BookingError):
    pass


CONFLICT_MESSAGE = "There's already a booking for this date and period"


def store_operation(func):
    """Re-raise database failures as BookingStoreError after logging them."""

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except DatabaseError as exc:
            logger.exception("Booking store failure in %s", func.__name__)
            raise BookingStoreError(f"{func.__name__} failed") from exc

    return wrapper


def validate_payload(data, partial=False):
    serializer = BookingSerializer(data=data, partial=partial)
    if not serializer.is_valid():
        raise BookingValidationError(serializer.errors)
    return dict(serializer.validated_data)


def bookings_on(day, exclude_id=None):
    queryset = Booking.objects.filter(booking_date=day)
    if exclude_id is not None:
        queryset = queryset.exclude(pk=exclude_id)
    return queryset


@store_operation
def list_bookings():
    return list(Booking.objects.order_by('booking_date', 'id'))


@store_operation
def list_bookings_on(day):
    return list(bookings_on(day))


@store_operation
def get_booking(booking_id):
    try:
        return Booking.objects.get(pk=booking_id)
    except Booking.DoesNotExist:
        raise BookingNotFound(f"Booking {booking_id} not found")


@store_operation
def check_conflict(day, period, exclude_id=None):
    existing = bookings_on(day, exclude_id).values_list('period', flat=True)
    return availability.has_conflict(existing, period)


@store_operation
def compute_available_periods(day, exclude_id=None):
    existing = bookings_on(day, exclude_id).values_list('period', flat=True)
    return availability.available_periods(existing)


def _lock_days(*days):
    # Sorted so concurrent writers touching the same two dates lock in one order.
    for day in sorted(set(days)):
        BookingDay.objects.select_for_update().get_or_create(date=day)


@store_operation
def create_booking(data):
    fields = validate_payload(data)

    with transaction.atomic():
        _lock_days(fields['booking_date'])

        if check_conflict(fields['booking_date'], fields['period']):
            logger.info(
                "Rejected booking on %s (%s): slot taken",
                fields['booking_date'], fields['period'],
            )
            raise BookingConflictError(CONFLICT_MESSAGE)

        booking = Booking.objects.create(**fields)

    logger.info("Booking %s created for %s (%s)", booking.id, booking.booking_date, booking.period)
    return booking


@store_operation
def update_booking(booking_id, data):
    fields = validate_payload(data, partial=True)

    with transaction.atomic():
        try:
            booking = Booking.objects.select_for_update().get(pk=booking_id)
        except Booking.DoesNotExist:
            raise BookingNotFound(f"Booking {booking_id} not found")

        if 'booking_date' in fields or 'period' in fields:
            day = fields.get('booking_date', booking.booking_date)
            period = fields.get('period', booking.period)
            _lock_days(booking.booking_date, day)

            if check_conflict(day, period, exclude_id=booking.pk):
                logger.info("Rejected update of booking %s to %s (%s): slot taken", booking.pk, day, period)
                raise BookingConflictError(CONFLICT_MESSAGE)

        for name, value in fields.items():
            setattr(booking, name, value)
        if fields:
            booking.save(update_fields=list(fields))

    logger.info("Booking %s updated (%s)", booking.pk, ', '.join(sorted(fields)) or 'no changes')
    return booking


@store_operation
def delete_booking(booking_id):
    deleted, _ = Booking.objects.filter(pk=booking_id).delete()
    if not deleted:
        raise BookingNotFound(f"Booking {booking_id} not found")
    logger.info("Booking %s deleted", booking_id)


@store_operation
def month_calendar(year, month):
    """One entry per day of the month with the booking id holding each slot."""
    errors = {}
    if not 1 <= year <= 9999:
        errors['year'] = ['Year must be between 1 and 9999.']
    if not 1 <= month <= 12:
        errors['month'] = ['Month must be between 1 and 12.']
    if errors:
        raise BookingValidationError(errors, 'Invalid calendar month')

    days_in_month = calendar.monthrange(year, month)[1]
    first = date(year, month, 1)
    last = date(year, month, days_in_month)

    by_day = {}
    for booking in Booking.objects.filter(booking_date__range=(first, last)):
        by_day.setdefault(booking.booking_date, []).append(booking)

    today = timezone.localdate()
    days = []
    for number in range(1, days_in_month + 1):
        day = date(year, month, number)
        bookings = by_day.get(day, [])
        slots = {}
        for booking in bookings:
            for slot in availability.slots_for(booking.period):
                slots[slot] = booking.id
        days.append({
            'date': day.isoformat(),
            'morning': slots.get(availability.MORNING_SLOT),
            'evening': slots.get(availability.EVENING_SLOT),
            'status': availability.day_status(b.period for b in bookings),
            'isPast': day < today,
        })
    return days
