from django.test import TestCase, Client, override_settings
import json

PASSWORD = 'chalet-passcode'


@override_settings(OPERATOR_PASSWORD=PASSWORD)
class OperatorGateTest(TestCase):
    def setUp(self):
        self.client = Client()

    def login(self, password):
        return self.client.post(
            '/api/auth/login/',
            data=json.dumps({'password': password}),
            content_type='application/json'
        )

    def test_booking_api_requires_session(self):
        response = self.client.get('/api/bookings/')
        self.assertEqual(response.status_code, 401)
        self.assertEqual(response.json()['error'], 'Authentication required')

    def test_wrong_password_rejected(self):
        with self.assertLogs('access.views', level='WARNING'):
            response = self.login('guess')
        self.assertEqual(response.status_code, 401)
        self.assertEqual(self.client.get('/api/bookings/').status_code, 401)

    def test_login_opens_booking_api(self):
        response = self.login(PASSWORD)
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json(), {'authenticated': True})

        self.assertEqual(self.client.get('/api/bookings/').status_code, 200)

        status = self.client.get('/api/auth/status/').json()
        self.assertTrue(status['authenticated'])
        self.assertTrue(status['gateEnabled'])

    def test_logout_closes_session(self):
        self.login(PASSWORD)
        response = self.client.post('/api/auth/logout/')
        self.assertEqual(response.status_code, 204)
        self.assertEqual(self.client.get('/api/bookings/').status_code, 401)

    def test_missing_password_and_bad_json(self):
        response = self.client.post('/api/auth/login/', data='{}', content_type='application/json')
        self.assertEqual(response.status_code, 400)

        response = self.client.post('/api/auth/login/', data='nope', content_type='application/json')
        self.assertEqual(response.status_code, 400)


class OpenGateTest(TestCase):
    def test_booking_api_open_without_password(self):
        client = Client()
        self.assertEqual(client.get('/api/bookings/').status_code, 200)
        self.assertEqual(client.get('/api/auth/status/').json(), {'authenticated': False, 'gateEnabled': False})
