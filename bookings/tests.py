from datetime import date
from unittest.mock import patch
import json

from django.db import DatabaseError
from django.test import SimpleTestCase, TestCase, Client

from . import availability, services
from .models import MAX_AMOUNT, Booking, BookingDay, Period


def booking_payload(**overrides):
    payload = {
        'bookingDate': '2024-06-01',
        'period': 'morning',
        'customerName': 'Ali',
        'customerPhone': '0790000000',
        'amountPaid': 50,
        'amountRemaining': 50,
        'peopleCount': 4,
    }
    payload.update(overrides)
    return payload


def make_booking(**overrides):
    fields = {
        'booking_date': date(2024, 6, 1),
        'period': Period.MORNING,
        'customer_name': 'Test User',
        'customer_phone': '0791111111',
        'amount_paid': 100,
        'amount_remaining': 0,
        'people_count': 10,
    }
    fields.update(overrides)
    return Booking.objects.create(**fields)


class BookingApiTestCase(TestCase):
    def setUp(self):
        self.client = Client()

    def post_booking(self, **overrides):
        return self.client.post(
            '/api/bookings/',
            data=json.dumps(booking_payload(**overrides)),
            content_type='application/json'
        )

    def patch_booking(self, booking_id, payload):
        return self.client.patch(
            f'/api/bookings/{booking_id}/',
            data=json.dumps(payload),
            content_type='application/json'
        )


class AvailabilityRulesTest(SimpleTestCase):
    def test_same_half_day_conflicts(self):
        self.assertTrue(availability.periods_conflict('morning', 'morning'))
        self.assertTrue(availability.periods_conflict('evening', 'evening'))

    def test_morning_and_evening_do_not_conflict(self):
        self.assertFalse(availability.periods_conflict('morning', 'evening'))
        self.assertFalse(availability.periods_conflict('evening', 'morning'))

    def test_both_conflicts_with_every_period(self):
        for period in Period:
            self.assertTrue(availability.periods_conflict(Period.BOTH, period))
            self.assertTrue(availability.periods_conflict(period, Period.BOTH))

    def test_has_conflict_with_no_existing_bookings(self):
        self.assertFalse(availability.has_conflict([], 'both'))

    def test_available_periods(self):
        self.assertEqual(availability.available_periods([]), [Period.MORNING, Period.EVENING, Period.BOTH])
        self.assertEqual(availability.available_periods(['evening']), [Period.MORNING])
        self.assertEqual(availability.available_periods(['morning']), [Period.EVENING])
        self.assertEqual(availability.available_periods(['morning', 'evening']), [])
        self.assertEqual(availability.available_periods(['both']), [])

    def test_day_status(self):
        self.assertEqual(availability.day_status([]), availability.DAY_FREE)
        self.assertEqual(availability.day_status(['evening']), availability.DAY_PARTIAL)
        self.assertEqual(availability.day_status(['morning', 'evening']), availability.DAY_FULL)
        self.assertEqual(availability.day_status(['both']), availability.DAY_FULL)

    def test_unknown_period_is_rejected(self):
        with self.assertRaises(ValueError):
            availability.slots_for('night')


class ConflictEvaluatorTest(TestCase):
    def test_check_conflict_on_empty_date(self):
        self.assertFalse(services.check_conflict(date(2024, 6, 1), 'both'))

    def test_check_conflict_only_looks_at_the_same_date(self):
        make_booking(booking_date=date(2024, 6, 2), period=Period.BOTH)
        self.assertFalse(services.check_conflict(date(2024, 6, 1), 'morning'))

    def test_excluded_booking_is_ignored(self):
        booking = make_booking(period=Period.BOTH)
        self.assertTrue(services.check_conflict(date(2024, 6, 1), 'evening'))
        self.assertFalse(services.check_conflict(date(2024, 6, 1), 'evening', exclude_id=booking.id))

    def test_compute_available_periods_excluding_booking(self):
        booking = make_booking(period=Period.MORNING)
        make_booking(period=Period.EVENING)
        self.assertEqual(services.compute_available_periods(date(2024, 6, 1)), [])
        self.assertEqual(
            services.compute_available_periods(date(2024, 6, 1), exclude_id=booking.id),
            [Period.MORNING]
        )

    def test_create_locks_the_booking_day(self):
        services.create_booking(booking_payload())
        self.assertTrue(BookingDay.objects.filter(date=date(2024, 6, 1)).exists())

    def test_conflicting_create_leaves_store_unchanged(self):
        make_booking(period=Period.BOTH)
        with self.assertRaises(services.BookingConflictError):
            services.create_booking(booking_payload(period='evening'))
        self.assertEqual(Booking.objects.count(), 1)


class BookingCreationTest(BookingApiTestCase):
    def test_create_then_duplicate_slot_conflicts(self):
        response = self.post_booking()
        self.assertEqual(response.status_code, 201)

        response = self.post_booking(customerName='Omar')
        self.assertEqual(response.status_code, 409)
        self.assertIn('error', response.json())
        self.assertEqual(Booking.objects.count(), 1)

    def test_morning_and_evening_share_a_date(self):
        self.assertEqual(self.post_booking(period='morning').status_code, 201)
        self.assertEqual(self.post_booking(period='evening').status_code, 201)
        self.assertEqual(self.post_booking(period='morning').status_code, 409)
        self.assertEqual(self.post_booking(period='evening').status_code, 409)

    def test_both_blocks_every_other_period(self):
        self.assertEqual(self.post_booking(period='both').status_code, 201)
        for period in ['morning', 'evening', 'both']:
            self.assertEqual(self.post_booking(period=period).status_code, 409)

    def test_both_rejected_when_any_slot_taken(self):
        self.assertEqual(self.post_booking(period='evening').status_code, 201)
        self.assertEqual(self.post_booking(period='both').status_code, 409)

    def test_other_dates_are_unaffected(self):
        self.assertEqual(self.post_booking(period='both').status_code, 201)
        self.assertEqual(self.post_booking(bookingDate='2024-06-02', period='both').status_code, 201)

    def test_response_shape(self):
        response = self.post_booking(amountPaid=500, amountRemaining=0)
        self.assertEqual(response.status_code, 201)
        data = response.json()
        self.assertEqual(data['bookingDate'], '2024-06-01')
        self.assertEqual(data['period'], 'morning')
        self.assertEqual(data['amountPaid'], 500)
        self.assertEqual(data['amountRemaining'], 0)
        self.assertIn('id', data)
        self.assertTrue(data['createdAt'])

    def test_missing_fields_return_validation_errors(self):
        response = self.client.post(
            '/api/bookings/',
            data=json.dumps({'bookingDate': '2024-06-01'}),
            content_type='application/json'
        )
        self.assertEqual(response.status_code, 400)
        errors = response.json()['errors']
        for field in ['period', 'customerName', 'customerPhone', 'amountPaid', 'amountRemaining', 'peopleCount']:
            self.assertIn(field, errors)
        self.assertEqual(Booking.objects.count(), 0)

    def test_people_count_bounds(self):
        self.assertEqual(self.post_booking(peopleCount=0).status_code, 400)
        self.assertEqual(self.post_booking(peopleCount=61).status_code, 400)
        self.assertEqual(self.post_booking(peopleCount=60).status_code, 201)

    def test_negative_amount_rejected(self):
        response = self.post_booking(amountRemaining=-1)
        self.assertEqual(response.status_code, 400)
        self.assertIn('amountRemaining', response.json()['errors'])

    def test_amount_beyond_column_range_rejected(self):
        response = self.post_booking(amountPaid=10 ** 30)
        self.assertEqual(response.status_code, 400)
        self.assertIn('amountPaid', response.json()['errors'])

        response = self.post_booking(amountRemaining=MAX_AMOUNT + 1)
        self.assertEqual(response.status_code, 400)
        self.assertIn('amountRemaining', response.json()['errors'])
        self.assertEqual(Booking.objects.count(), 0)

        self.assertEqual(self.post_booking(amountPaid=MAX_AMOUNT).status_code, 201)

    def test_short_name_and_phone_rejected(self):
        response = self.post_booking(customerName='A', customerPhone='0790')
        self.assertEqual(response.status_code, 400)
        errors = response.json()['errors']
        self.assertIn('customerName', errors)
        self.assertIn('customerPhone', errors)

    def test_unknown_period_rejected(self):
        response = self.post_booking(period='night')
        self.assertEqual(response.status_code, 400)
        self.assertIn('period', response.json()['errors'])

    def test_invalid_date_rejected(self):
        response = self.post_booking(bookingDate='2024-02-30')
        self.assertEqual(response.status_code, 400)
        self.assertIn('bookingDate', response.json()['errors'])

    def test_invalid_json(self):
        response = self.client.post('/api/bookings/', data='{not json', content_type='application/json')
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()['error'], 'Invalid JSON')

    def test_client_supplied_id_and_created_at_are_ignored(self):
        response = self.post_booking(id=999, createdAt='2000-01-01T00:00:00Z')
        self.assertEqual(response.status_code, 201)
        data = response.json()
        self.assertNotEqual(data['id'], 999)
        self.assertFalse(data['createdAt'].startswith('2000'))


class BookingRetrievalTest(BookingApiTestCase):
    def test_create_then_fetch_round_trip(self):
        created = self.post_booking().json()

        response = self.client.get(f"/api/bookings/{created['id']}/")
        self.assertEqual(response.status_code, 200)
        data = response.json()
        self.assertEqual(data, created)
        self.assertEqual(data['bookingDate'], '2024-06-01')
        self.assertEqual(data['customerName'], 'Ali')
        self.assertEqual(data['customerPhone'], '0790000000')
        self.assertEqual(data['peopleCount'], 4)
        self.assertIsNotNone(data['createdAt'])

    def test_invalid_booking_id(self):
        response = self.client.get('/api/bookings/abc/')
        self.assertEqual(response.status_code, 400)

    def test_missing_booking(self):
        response = self.client.get('/api/bookings/9999/')
        self.assertEqual(response.status_code, 404)

    def test_list_all_bookings(self):
        later = make_booking(booking_date=date(2024, 7, 1))
        earlier = make_booking(booking_date=date(2024, 6, 1))

        response = self.client.get('/api/bookings/')
        self.assertEqual(response.status_code, 200)
        self.assertEqual([b['id'] for b in response.json()], [earlier.id, later.id])

    def test_list_by_date(self):
        on_day = make_booking(booking_date=date(2024, 6, 1), period=Period.EVENING)
        make_booking(booking_date=date(2024, 6, 2))

        response = self.client.get('/api/bookings/date/2024-06-01/')
        self.assertEqual(response.status_code, 200)
        data = response.json()
        self.assertEqual(len(data), 1)
        self.assertEqual(data[0]['id'], on_day.id)

    def test_list_by_invalid_date(self):
        for raw in ['2024-13-01', '01-06-2024', 'tomorrow']:
            response = self.client.get(f'/api/bookings/date/{raw}/')
            self.assertEqual(response.status_code, 400)


class BookingUpdateTest(BookingApiTestCase):
    def setUp(self):
        super().setUp()
        self.booking = make_booking(period=Period.MORNING)

    def test_update_to_own_slot_does_not_self_conflict(self):
        response = self.patch_booking(self.booking.id, {'bookingDate': '2024-06-01', 'period': 'morning'})
        self.assertEqual(response.status_code, 200)

    def test_widen_to_both_when_alone(self):
        response = self.patch_booking(self.booking.id, {'period': 'both'})
        self.assertEqual(response.status_code, 200)
        self.booking.refresh_from_db()
        self.assertEqual(self.booking.period, Period.BOTH)

    def test_partial_update_leaves_other_fields(self):
        created_at = self.booking.created_at
        response = self.patch_booking(self.booking.id, {'customerName': 'New Name', 'id': 555})
        self.assertEqual(response.status_code, 200)
        data = response.json()
        self.assertEqual(data['id'], self.booking.id)
        self.assertEqual(data['customerName'], 'New Name')
        self.assertEqual(data['period'], 'morning')

        self.booking.refresh_from_db()
        self.assertEqual(self.booking.customer_name, 'New Name')
        self.assertEqual(self.booking.customer_phone, '0791111111')
        self.assertEqual(self.booking.created_at, created_at)

    def test_conflicting_update_leaves_record_unchanged(self):
        make_booking(period=Period.EVENING, booking_date=date(2024, 6, 5))

        response = self.patch_booking(
            self.booking.id,
            {'bookingDate': '2024-06-05', 'period': 'evening', 'customerName': 'Changed'}
        )
        self.assertEqual(response.status_code, 409)

        self.booking.refresh_from_db()
        self.assertEqual(self.booking.booking_date, date(2024, 6, 1))
        self.assertEqual(self.booking.customer_name, 'Test User')

    def test_period_change_checked_against_existing_date(self):
        make_booking(period=Period.EVENING)
        response = self.patch_booking(self.booking.id, {'period': 'both'})
        self.assertEqual(response.status_code, 409)

    def test_move_to_free_date(self):
        response = self.patch_booking(self.booking.id, {'bookingDate': '2024-06-10'})
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()['bookingDate'], '2024-06-10')

    def test_invalid_payload(self):
        response = self.patch_booking(self.booking.id, {'peopleCount': 100})
        self.assertEqual(response.status_code, 400)
        self.assertIn('peopleCount', response.json()['errors'])

    def test_amount_beyond_column_range_rejected(self):
        response = self.patch_booking(self.booking.id, {'amountPaid': 10 ** 30})
        self.assertEqual(response.status_code, 400)
        self.assertIn('amountPaid', response.json()['errors'])

        self.booking.refresh_from_db()
        self.assertEqual(self.booking.amount_paid, 100)

    def test_missing_and_invalid_ids(self):
        self.assertEqual(self.patch_booking(9999, {'customerName': 'Someone'}).status_code, 404)
        self.assertEqual(self.patch_booking('abc', {'customerName': 'Someone'}).status_code, 400)


class BookingDeleteTest(BookingApiTestCase):
    def test_delete_frees_the_slot(self):
        booking_id = self.post_booking().json()['id']
        self.assertEqual(self.post_booking().status_code, 409)

        response = self.client.delete(f'/api/bookings/{booking_id}/')
        self.assertEqual(response.status_code, 204)
        self.assertFalse(Booking.objects.filter(id=booking_id).exists())

        self.assertEqual(self.post_booking().status_code, 201)

    def test_delete_missing_booking(self):
        booking = make_booking()
        self.assertEqual(self.client.delete(f'/api/bookings/{booking.id}/').status_code, 204)
        self.assertEqual(self.client.delete(f'/api/bookings/{booking.id}/').status_code, 404)

    def test_delete_invalid_id(self):
        self.assertEqual(self.client.delete('/api/bookings/abc/').status_code, 400)


class AvailabilityEndpointTest(BookingApiTestCase):
    def get_available(self, day='2024-06-01', **params):
        response = self.client.get(f'/api/bookings/date/{day}/availability/', params)
        self.assertEqual(response.status_code, 200)
        return response.json()['availablePeriods']

    def test_empty_date(self):
        self.assertEqual(self.get_available(), ['morning', 'evening', 'both'])

    def test_one_morning_booking(self):
        make_booking(period=Period.MORNING)
        self.assertEqual(self.get_available(), ['evening'])

    def test_full_dates(self):
        make_booking(period=Period.MORNING)
        make_booking(period=Period.EVENING)
        make_booking(booking_date=date(2024, 6, 2), period=Period.BOTH)
        self.assertEqual(self.get_available('2024-06-01'), [])
        self.assertEqual(self.get_available('2024-06-02'), [])

    def test_exclude_id(self):
        booking = make_booking(period=Period.MORNING)
        self.assertEqual(self.get_available(excludeId=booking.id), ['morning', 'evening', 'both'])

    def test_invalid_input(self):
        self.assertEqual(self.client.get('/api/bookings/date/nope/availability/').status_code, 400)
        response = self.client.get('/api/bookings/date/2024-06-01/availability/', {'excludeId': 'x'})
        self.assertEqual(response.status_code, 400)


class CheckConflictEndpointTest(BookingApiTestCase):
    def check(self, **params):
        return self.client.get('/api/bookings/check-conflict/', params)

    def test_reports_conflict(self):
        booking = make_booking(period=Period.MORNING)

        self.assertEqual(self.check(date='2024-06-01', period='morning').json(), {'conflict': True})
        self.assertEqual(self.check(date='2024-06-01', period='evening').json(), {'conflict': False})
        self.assertEqual(self.check(date='2024-06-01', period='both').json(), {'conflict': True})
        self.assertEqual(
            self.check(date='2024-06-01', period='both', excludeId=booking.id).json(),
            {'conflict': False}
        )

    def test_invalid_parameters(self):
        self.assertEqual(self.check(period='morning').status_code, 400)
        self.assertEqual(self.check(date='2024-06-01', period='night').status_code, 400)
        self.assertEqual(self.check(date='2024-06-01', period='morning', excludeId='x').status_code, 400)


class MonthCalendarTest(BookingApiTestCase):
    @patch('bookings.services.timezone.localdate', return_value=date(2024, 6, 15))
    def test_month_overview(self, mock_localdate):
        morning = make_booking(booking_date=date(2024, 6, 1), period=Period.MORNING)
        both = make_booking(booking_date=date(2024, 6, 20), period=Period.BOTH)

        response = self.client.get('/api/bookings/calendar/2024/6/')
        self.assertEqual(response.status_code, 200)
        days = response.json()
        self.assertEqual(len(days), 30)

        first = days[0]
        self.assertEqual(first['date'], '2024-06-01')
        self.assertEqual(first['morning'], morning.id)
        self.assertIsNone(first['evening'])
        self.assertEqual(first['status'], 'partial')
        self.assertTrue(first['isPast'])

        twentieth = days[19]
        self.assertEqual(twentieth['morning'], both.id)
        self.assertEqual(twentieth['evening'], both.id)
        self.assertEqual(twentieth['status'], 'full')
        self.assertFalse(twentieth['isPast'])

        self.assertEqual(days[1]['status'], 'free')

    def test_invalid_month(self):
        response = self.client.get('/api/bookings/calendar/2024/13/')
        self.assertEqual(response.status_code, 400)
        errors = response.json()['errors']
        self.assertIn('month', errors)
        self.assertNotIn('year', errors)

    def test_invalid_year(self):
        response = self.client.get('/api/bookings/calendar/0/5/')
        self.assertEqual(response.status_code, 400)
        errors = response.json()['errors']
        self.assertIn('year', errors)
        self.assertNotIn('month', errors)


class StoreFailureTest(BookingApiTestCase):
    def test_list_failure_is_opaque(self):
        with patch.object(Booking.objects, 'order_by', side_effect=DatabaseError('connection lost')):
            with self.assertLogs('bookings.services', level='ERROR'):
                response = self.client.get('/api/bookings/')

        self.assertEqual(response.status_code, 500)
        self.assertEqual(response.json(), {'error': 'Failed to fetch bookings'})

    def test_create_failure_is_opaque(self):
        with patch.object(Booking.objects, 'create', side_effect=DatabaseError('disk full')):
            with self.assertLogs('bookings.services', level='ERROR'):
                response = self.post_booking()

        self.assertEqual(response.status_code, 500)
        self.assertNotIn('disk full', response.content.decode())

    def test_fetch_failure_is_opaque(self):
        booking = make_booking()
        with patch.object(Booking.objects, 'get', side_effect=DatabaseError('connection lost')):
            with self.assertLogs('bookings.services', level='ERROR'):
                response = self.client.get(f'/api/bookings/{booking.id}/')

        self.assertEqual(response.status_code, 500)
        self.assertEqual(response.json(), {'error': 'Failed to fetch booking'})

    def test_update_failure_is_opaque(self):
        booking = make_booking()
        with patch.object(Booking.objects, 'select_for_update', side_effect=DatabaseError('lock timeout')):
            with self.assertLogs('bookings.services', level='ERROR'):
                response = self.patch_booking(booking.id, {'customerName': 'Someone Else'})

        self.assertEqual(response.status_code, 500)
        self.assertEqual(response.json(), {'error': 'Failed to update booking'})
        booking.refresh_from_db()
        self.assertEqual(booking.customer_name, 'Test User')

    def test_delete_failure_is_opaque(self):
        booking = make_booking()
        with patch.object(Booking.objects, 'filter', side_effect=DatabaseError('connection lost')):
            with self.assertLogs('bookings.services', level='ERROR'):
                response = self.client.delete(f'/api/bookings/{booking.id}/')

        self.assertEqual(response.status_code, 500)
        self.assertEqual(response.json(), {'error': 'Failed to delete booking'})
        self.assertTrue(Booking.objects.filter(id=booking.id).exists())

    def test_by_date_failure_is_opaque(self):
        with patch.object(Booking.objects, 'filter', side_effect=DatabaseError('connection lost')):
            with self.assertLogs('bookings.services', level='ERROR'):
                response = self.client.get('/api/bookings/date/2024-06-01/')

        self.assertEqual(response.status_code, 500)
        self.assertEqual(response.json(), {'error': 'Failed to fetch bookings by date'})

    def test_availability_failure_is_opaque(self):
        with patch.object(Booking.objects, 'filter', side_effect=DatabaseError('connection lost')):
            with self.assertLogs('bookings.services', level='ERROR'):
                response = self.client.get('/api/bookings/date/2024-06-01/availability/')

        self.assertEqual(response.status_code, 500)
        self.assertEqual(response.json(), {'error': 'Failed to compute availability'})

    def test_check_conflict_failure_is_opaque(self):
        with patch.object(Booking.objects, 'filter', side_effect=DatabaseError('connection lost')):
            with self.assertLogs('bookings.services', level='ERROR'):
                response = self.client.get(
                    '/api/bookings/check-conflict/', {'date': '2024-06-01', 'period': 'morning'}
                )

        self.assertEqual(response.status_code, 500)
        self.assertEqual(response.json(), {'error': 'Failed to check for conflicts'})
