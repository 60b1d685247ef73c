import json
from datetime import datetime

from django.http import HttpResponse, JsonResponse
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_http_methods

from . import services
from .models import Period
from .serializers import BookingSerializer


def _parse_day(raw):
    try:
        return datetime.strptime(raw, '%Y-%m-%d').date()
    except (TypeError, ValueError):
        return None


def _parse_id(raw):
    try:
        return int(raw)
    except (TypeError, ValueError):
        return None


def _load_json(request):
    try:
        return json.loads(request.body)
    except (json.JSONDecodeError, UnicodeDecodeError):
        return None


def _validation_response(error):
    return JsonResponse({'error': str(error), 'errors': error.errors}, status=400)


@csrf_exempt
@require_http_methods(["GET", "POST"])
def booking_collection(request):
    if request.method == 'POST':
        return create_booking(request)

    try:
        bookings = services.list_bookings()
    except services.BookingStoreError:
        return JsonResponse({'error': 'Failed to fetch bookings'}, status=500)

    return JsonResponse(BookingSerializer(bookings, many=True).data, safe=False)


def create_booking(request):
    data = _load_json(request)
    if data is None:
        return JsonResponse({'error': 'Invalid JSON'}, status=400)

    try:
        booking = services.create_booking(data)
    except services.BookingValidationError as e:
        return _validation_response(e)
    except services.BookingConflictError as e:
        return JsonResponse({'error': str(e)}, status=409)
    except services.BookingStoreError:
        return JsonResponse({'error': 'Failed to create booking'}, status=500)

    return JsonResponse(BookingSerializer(booking).data, status=201)


@csrf_exempt
@require_http_methods(["GET", "PATCH", "DELETE"])
def booking_detail(request, booking_id):
    booking_id = _parse_id(booking_id)
    if booking_id is None:
        return JsonResponse({'error': 'Invalid booking ID'}, status=400)

    if request.method == 'PATCH':
        return update_booking(request, booking_id)
    if request.method == 'DELETE':
        return delete_booking(request, booking_id)

    try:
        booking = services.get_booking(booking_id)
    except services.BookingNotFound:
        return JsonResponse({'error': 'Booking not found'}, status=404)
    except services.BookingStoreError:
        return JsonResponse({'error': 'Failed to fetch booking'}, status=500)

    return JsonResponse(BookingSerializer(booking).data)


def update_booking(request, booking_id):
    data = _load_json(request)
    if data is None:
        return JsonResponse({'error': 'Invalid JSON'}, status=400)

    try:
        booking = services.update_booking(booking_id, data)
    except services.BookingValidationError as e:
        return _validation_response(e)
    except services.BookingNotFound:
        return JsonResponse({'error': 'Booking not found'}, status=404)
    except services.BookingConflictError as e:
        return JsonResponse({'error': str(e)}, status=409)
    except services.BookingStoreError:
        return JsonResponse({'error': 'Failed to update booking'}, status=500)

    return JsonResponse(BookingSerializer(booking).data)


def delete_booking(request, booking_id):
    try:
        services.delete_booking(booking_id)
    except services.BookingNotFound:
        return JsonResponse({'error': 'Booking not found'}, status=404)
    except services.BookingStoreError:
        return JsonResponse({'error': 'Failed to delete booking'}, status=500)

    return HttpResponse(status=204)


@require_http_methods(["GET"])
def bookings_by_date(request, day):
    booking_date = _parse_day(day)
    if booking_date is None:
        return JsonResponse({'error': 'Invalid date format. Use YYYY-MM-DD'}, status=400)

    try:
        bookings = services.list_bookings_on(booking_date)
    except services.BookingStoreError:
        return JsonResponse({'error': 'Failed to fetch bookings by date'}, status=500)

    return JsonResponse(BookingSerializer(bookings, many=True).data, safe=False)


@require_http_methods(["GET"])
def date_availability(request, day):
    booking_date = _parse_day(day)
    if booking_date is None:
        return JsonResponse({'error': 'Invalid date format. Use YYYY-MM-DD'}, status=400)

    exclude_id = request.GET.get('excludeId')
    if exclude_id is not None:
        exclude_id = _parse_id(exclude_id)
        if exclude_id is None:
            return JsonResponse({'error': 'Invalid excludeId'}, status=400)

    try:
        periods = services.compute_available_periods(booking_date, exclude_id=exclude_id)
    except services.BookingStoreError:
        return JsonResponse({'error': 'Failed to compute availability'}, status=500)

    return JsonResponse({
        'date': booking_date.isoformat(),
        'availablePeriods': [period.value for period in periods],
    })


@require_http_methods(["GET"])
def check_conflict(request):
    booking_date = _parse_day(request.GET.get('date'))
    period = request.GET.get('period')
    exclude_id = request.GET.get('excludeId')

    if booking_date is None:
        return JsonResponse({'error': 'Invalid date format. Use YYYY-MM-DD'}, status=400)
    if period not in Period.values:
        return JsonResponse({'error': 'period must be one of: morning, evening, both'}, status=400)
    if exclude_id is not None:
        exclude_id = _parse_id(exclude_id)
        if exclude_id is None:
            return JsonResponse({'error': 'Invalid excludeId'}, status=400)

    try:
        conflict = services.check_conflict(booking_date, period, exclude_id=exclude_id)
    except services.BookingStoreError:
        return JsonResponse({'error': 'Failed to check for conflicts'}, status=500)

    return JsonResponse({'conflict': conflict})


@require_http_methods(["GET"])
def month_calendar(request, year, month):
    try:
        days = services.month_calendar(year, month)
    except services.BookingValidationError as e:
        return _validation_response(e)
    except services.BookingStoreError:
        return JsonResponse({'error': 'Failed to build calendar'}, status=500)

    return JsonResponse(days, safe=False)
