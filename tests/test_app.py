"""
Tests for the Flask application core functionality.
Tests app factory, health, app info routes and error handling.
"""

import unittest

from flask import Flask
from sqlalchemy import inspect

from cinevault.app import create_app, init_db
from cinevault.config import TestingConfig
from cinevault.models import db


class AppTestCase(unittest.TestCase):
    """Base case: fresh app and in-memory database per test."""

    def setUp(self):
        """Set up test client before each test."""
        self.app = create_app(TestingConfig)
        self.client = self.app.test_client()

        with self.app.app_context():
            db.create_all()

    def tearDown(self):
        """Clean up after each test."""
        with self.app.app_context():
            db.session.remove()
            db.drop_all()


class TestAppFactory(unittest.TestCase):
    """Test application factory and configuration."""

    def test_create_app_returns_flask_instance(self):
        self.assertIsInstance(create_app(TestingConfig), Flask)

    def test_testing_config_applied(self):
        app = create_app(TestingConfig)
        self.assertTrue(app.config['TESTING'])
        self.assertEqual(app.config['SQLALCHEMY_DATABASE_URI'], 'sqlite:///:memory:')
        self.assertEqual(app.config['APP_ENV'], 'Testing')

    def test_mapping_overrides(self):
        app = create_app({'TESTING': True, 'SQLALCHEMY_DATABASE_URI': 'sqlite:///:memory:', 'APP_ENV': 'Staging'})
        self.assertEqual(app.config['APP_ENV'], 'Staging')

    def test_apps_are_independent(self):
        first = create_app(TestingConfig)
        second = create_app(TestingConfig)
        self.assertIsNot(first, second)
        self.assertIn('v2.movies', second.blueprints)

    def test_init_db_creates_tables(self):
        app = create_app(TestingConfig)
        init_db(app)
        with app.app_context():
            tables = set(inspect(db.engine).get_table_names())
            self.assertTrue({'movies', 'actors', 'users', 'reviews', 'likes', 'movie_actors'} <= tables)
            db.drop_all()


class TestHealthEndpoint(AppTestCase):
    """Test the health check endpoint."""

    def test_health_endpoint_status_healthy(self):
        response = self.client.get('/health')
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.content_type, 'application/json')
        data = response.get_json()
        self.assertEqual(data['status'], 'healthy')
        self.assertEqual(data['service'], 'cinevault')


class TestAppInfoRoutes(AppTestCase):
    """Test environment and version probe routes."""

    def test_environment_v1_and_v2(self):
        for version in ('v1', 'v2'):
            response = self.client.get(f'/api/{version}/environment')
            self.assertEqual(response.status_code, 200)
            self.assertEqual(response.get_json(), {'environment_name': 'Testing'})

    def test_old_endpoint_only_in_v1(self):
        response = self.client.get('/api/v1/old-endpoint')
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.get_json(), 'Old version endpoint')
        self.assertEqual(self.client.get('/api/v2/old-endpoint').status_code, 404)

    def test_new_endpoint_only_in_v2(self):
        response = self.client.get('/api/v2/new-endpoint')
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.get_json(), 'New version endpoint')
        self.assertEqual(self.client.get('/api/v1/new-endpoint').status_code, 404)


class TestErrorHandling(AppTestCase):
    """Test JSON error responses."""

    def test_throw_exception_v1(self):
        response = self.client.get('/api/v1/throw-exception')
        self.assertEqual(response.status_code, 500)
        data = response.get_json()
        self.assertEqual(data['status'], 'error')
        self.assertEqual(data['error'], 'An unexpected error occurred.')
        self.assertEqual(data['request_id'], response.headers['X-Request-ID'])
        self.assertNotIn('never be called', response.get_data(as_text=True))

    def test_throw_exception_v2(self):
        response = self.client.get('/api/v2/throw-exception')
        self.assertEqual(response.status_code, 500)
        data = response.get_json()
        self.assertEqual(data['status_code'], 500)
        self.assertIn('request_id', data['data'])

    def test_unknown_route_v1(self):
        response = self.client.get('/api/v1/Movies/Nothing')
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.get_json()['status'], 'error')

    def test_unknown_route_v2(self):
        response = self.client.get('/api/v2/Movies/Nothing')
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.get_json()['status_code'], 404)

    def test_malformed_json_body(self):
        response = self.client.post(
            '/api/v1/Movies/CreateMovie', data='{not json', content_type='application/json'
        )
        self.assertEqual(response.status_code, 400)

    def test_envelope_must_be_object(self):
        response = self.client.post('/api/v2/Movies/CreateMovie', json=[1, 2, 3])
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.get_json()['status_code'], 400)


class TestRequestIds(AppTestCase):
    """Test X-Request-ID propagation."""

    def test_request_id_generated(self):
        response = self.client.get('/health')
        self.assertTrue(response.headers.get('X-Request-ID'))

    def test_inbound_request_id_echoed(self):
        response = self.client.get('/health', headers={'X-Request-ID': 'trace-abc'})
        self.assertEqual(response.headers['X-Request-ID'], 'trace-abc')


class TestMetricsEndpoint(AppTestCase):

    def test_metrics_endpoint(self):
        self.client.get('/health')
        response = self.client.get('/api/metrics')
        self.assertEqual(response.status_code, 200)
        self.assertTrue(response.content_type.startswith('text/plain'))
        self.assertIn('cinevault_http_requests_total', response.get_data(as_text=True))


if __name__ == '__main__':
    unittest.main()
