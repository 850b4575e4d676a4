"""
Integration tests for categories, events and ticket types.
Run with: python -m unittest tests.test_catalog_api -v
"""

import unittest
from decimal import Decimal

from tests.support import AppTestCase
from ticketbox.extensions import db
from ticketbox.models import Category, Event, Ticket


class CatalogTestCase(AppTestCase):

    def setUp(self):
        super().setUp()
        self.admin = self.make_user('admin@example.com', role='admin')
        self.customer = self.make_user('customer@example.com')
        self.admin_headers = self.auth_headers(self.admin)
        self.customer_headers = self.auth_headers(self.customer)


class TestCategories(CatalogTestCase):

    def test_crud(self):
        resp = self.client.post('/api/categories', json={'name': 'Music'}, headers=self.admin_headers)
        self.assertEqual(resp.status_code, 201)
        category_id = resp.get_json()['id']

        resp = self.client.put(f'/api/categories/{category_id}', json={'name': 'Concerts'},
                               headers=self.admin_headers)
        self.assertEqual(resp.get_json()['name'], 'Concerts')

        self.assertEqual(self.client.get('/api/categories').get_json(), [{'id': category_id, 'name': 'Concerts'}])
        self.assertEqual(self.client.get(f'/api/categories/{category_id}').status_code, 200)

        resp = self.client.delete(f'/api/categories/{category_id}', headers=self.admin_headers)
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(self.client.get(f'/api/categories/{category_id}').status_code, 404)

    def test_mutations_require_admin(self):
        resp = self.client.post('/api/categories', json={'name': 'Music'}, headers=self.customer_headers)
        self.assertEqual(resp.status_code, 403)
        resp = self.client.post('/api/categories', json={'name': 'Music'})
        self.assertEqual(resp.status_code, 401)
        self.assertEqual(Category.query.count(), 0)

    def test_missing_name(self):
        resp = self.client.post('/api/categories', json={'name': '  '}, headers=self.admin_headers)
        self.assertEqual(resp.status_code, 400)

    def test_non_object_body_is_400(self):
        resp = self.client.post('/api/categories', json=['Music'], headers=self.admin_headers)
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(Category.query.count(), 0)

    def test_unknown_category(self):
        resp = self.client.put('/api/categories/99', json={'name': 'x'}, headers=self.admin_headers)
        self.assertEqual(resp.status_code, 404)
        self.assertEqual(self.client.delete('/api/categories/99', headers=self.admin_headers).status_code, 404)


class TestEvents(CatalogTestCase):

    def event_body(self, **overrides):
        body = {
            'title': 'Rock Night',
            'event_date': '2030-05-01T19:00:00Z',
            'location': 'My Dinh Stadium',
            'organizer': 'Live Nation',
        }
        body.update(overrides)
        return body

    def test_create_and_get(self):
        category = self.make_category()
        resp = self.client.post('/api/events', json=self.event_body(category_id=category.id),
                                headers=self.admin_headers)

        self.assertEqual(resp.status_code, 201)
        event = resp.get_json()
        self.assertEqual(event['admin_id'], self.admin.id)
        self.assertEqual(event['category_name'], 'Music')

        resp = self.client.get(f"/api/events/{event['id']}")
        self.assertEqual(resp.get_json()['title'], 'Rock Night')

    def test_create_requires_title_date_location(self):
        for missing in ('title', 'event_date', 'location'):
            with self.subTest(missing=missing):
                body = self.event_body()
                del body[missing]
                resp = self.client.post('/api/events', json=body, headers=self.admin_headers)
                self.assertEqual(resp.status_code, 400)

    def test_create_rejects_bad_date(self):
        resp = self.client.post('/api/events', json=self.event_body(event_date='next tuesday'),
                                headers=self.admin_headers)
        self.assertEqual(resp.status_code, 400)

    def test_create_rejects_non_object_body(self):
        resp = self.client.post('/api/events', json=[self.event_body()], headers=self.admin_headers)
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(Event.query.count(), 0)

    def test_customer_cannot_create(self):
        resp = self.client.post('/api/events', json=self.event_body(), headers=self.customer_headers)
        self.assertEqual(resp.status_code, 403)

    def test_update(self):
        event = self.make_event()
        resp = self.client.put(f'/api/events/{event.id}', json=self.event_body(title='Rock Night II'),
                               headers=self.admin_headers)

        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.get_json()['title'], 'Rock Night II')
        self.assertEqual(self.client.put('/api/events/999', json=self.event_body(),
                                         headers=self.admin_headers).status_code, 404)

    def test_list_filters_by_category(self):
        music = self.make_category('Music')
        sport = self.make_category('Sport')
        self.make_event('Concert', category=music)
        self.make_event('Match', category=sport)

        resp = self.client.get(f'/api/events?category_id={sport.id}')

        self.assertEqual([e['title'] for e in resp.get_json()], ['Match'])
        self.assertEqual(len(self.client.get('/api/events').get_json()), 2)

    def test_featured_and_upcoming(self):
        self.make_event('Past featured', days_from_now=-10, featured=True)
        self.make_event('Soon', days_from_now=2)
        self.make_event('Later featured', days_from_now=40, featured=True)

        featured = [e['title'] for e in self.client.get('/api/events/featured').get_json()]
        upcoming = [e['title'] for e in self.client.get('/api/events/upcoming').get_json()]

        self.assertEqual(featured, ['Later featured', 'Past featured'])
        self.assertEqual(upcoming, ['Soon', 'Later featured'])

    def test_delete_removes_ticket_types(self):
        event = self.make_event()
        self.make_ticket(event=event)

        resp = self.client.delete(f'/api/events/{event.id}', headers=self.admin_headers)

        self.assertEqual(resp.status_code, 200)
        self.assertEqual(Event.query.count(), 0)
        self.assertEqual(Ticket.query.count(), 0)

    def test_delete_refused_after_sales(self):
        event = self.make_event()
        ticket = self.make_ticket(event=event)
        self.client.post('/api/orders', json={'ticket_id': ticket.id, 'quantity': 1},
                         headers=self.customer_headers)

        resp = self.client.delete(f'/api/events/{event.id}', headers=self.admin_headers)

        self.assertEqual(resp.status_code, 409)
        self.assertEqual(Event.query.count(), 1)

    def test_unknown_event(self):
        self.assertEqual(self.client.get('/api/events/404').status_code, 404)
        self.assertEqual(self.client.delete('/api/events/404', headers=self.admin_headers).status_code, 404)


class TestTicketTypes(CatalogTestCase):

    def test_list_cheapest_first(self):
        event = self.make_event()
        self.make_ticket(event=event, ticket_type='VIP', price='300.00')
        self.make_ticket(event=event, ticket_type='Standard', price='100.00')

        resp = self.client.get(f'/api/tickets/{event.id}')

        self.assertEqual([t['type'] for t in resp.get_json()], ['Standard', 'VIP'])
        self.assertEqual(resp.get_json()[0]['price'], 100.0)

    def test_create(self):
        event = self.make_event()
        resp = self.client.post('/api/tickets', headers=self.admin_headers, json={
            'event_id': event.id, 'type': 'Early bird', 'price': 99.5, 'quantity_available': 50,
        })

        self.assertEqual(resp.status_code, 201)
        ticket = db.session.get(Ticket, resp.get_json()['id'])
        self.assertEqual(ticket.price, Decimal('99.50'))
        self.assertEqual(ticket.quantity_available, 50)

    def test_create_validation(self):
        event = self.make_event()
        bad_bodies = [
            {'event_id': event.id, 'type': 'A', 'price': -1, 'quantity_available': 5},
            {'event_id': event.id, 'type': 'A', 'price': 10, 'quantity_available': -5},
            {'event_id': event.id, 'type': '', 'price': 10, 'quantity_available': 5},
            {'event_id': event.id, 'type': 'A', 'price': 'abc', 'quantity_available': 5},
        ]
        for body in bad_bodies:
            with self.subTest(body=body):
                resp = self.client.post('/api/tickets', json=body, headers=self.admin_headers)
                self.assertEqual(resp.status_code, 400)

        resp = self.client.post('/api/tickets', headers=self.admin_headers, json={
            'event_id': 999, 'type': 'A', 'price': 10, 'quantity_available': 5,
        })
        self.assertEqual(resp.status_code, 404)

    def test_non_object_body_is_400(self):
        ticket = self.make_ticket()

        resp = self.client.post('/api/tickets', json=[ticket.event_id, 'A', 10, 5],
                                headers=self.admin_headers)
        self.assertEqual(resp.status_code, 400)

        resp = self.client.patch(f'/api/tickets/{ticket.id}', json=['quantity_available'],
                                 headers=self.admin_headers)
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(Ticket.query.count(), 1)

    def test_price_change_keeps_order_snapshot(self):
        ticket = self.make_ticket(price='150.00')
        self.client.post('/api/orders', json={'ticket_id': ticket.id, 'quantity': 1},
                         headers=self.customer_headers)

        resp = self.client.patch(f'/api/tickets/{ticket.id}', json={'price': '180.00'},
                                 headers=self.admin_headers)

        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.get_json()['price'], 180.0)
        history = self.client.get('/api/orders/mine', headers=self.customer_headers).get_json()
        self.assertEqual(history[0]['price'], 150.0)

    def test_stock_is_not_editable(self):
        ticket = self.make_ticket(stock=5)

        resp = self.client.patch(f'/api/tickets/{ticket.id}', json={'quantity_available': 500},
                                 headers=self.admin_headers)

        self.assertEqual(resp.status_code, 400)
        db.session.expire_all()
        self.assertEqual(db.session.get(Ticket, ticket.id).quantity_available, 5)


class TestHealth(AppTestCase):

    def test_health(self):
        resp = self.client.get('/health')
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.get_json()['status'], 'healthy')

    def test_unknown_route_is_json_404(self):
        resp = self.client.get('/api/nope')
        self.assertEqual(resp.status_code, 404)
        self.assertEqual(resp.get_json(), {'msg': 'Not found'})


class TestApiDocs(AppTestCase):

    def test_spec_lists_documented_routes(self):
        resp = self.client.get('/apispec_1.json')

        self.assertEqual(resp.status_code, 200)
        paths = resp.get_json()['paths']
        self.assertIn('post', paths['/api/orders'])
        self.assertIn('get', paths['/api/orders/mine'])
        for route in ('/api/auth/register', '/api/auth/login', '/api/auth/refresh', '/api/auth/logout'):
            self.assertIn(route, paths)
        self.assertIn('Bearer', resp.get_json()['securityDefinitions'])


if __name__ == '__main__':
    unittest.main()
