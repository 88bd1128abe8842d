"""Item catalog tests."""

from decimal import Decimal

from django.contrib.auth import get_user_model
from django.test import TestCase, override_settings
from rest_framework.test import APIClient

from items.models import Item
from items.services import resolve_items


class ResolveItemsTests(TestCase):
	@classmethod
	def setUpTestData(cls):
		User = get_user_model()
		cls.owner = User.objects.create_user(username='menu_owner', password='12345678')
		cls.other = User.objects.create_user(username='menu_other', password='12345678')
		cls.tea = Item.objects.create(owner=cls.owner, name='Tea', price=Decimal('10.00'))
		cls.old = Item.objects.create(owner=cls.owner, name='Old', price=Decimal('10.00'), is_active=False)
		cls.theirs = Item.objects.create(owner=cls.other, name='Coffee', price=Decimal('20.00'))

	def test_only_active_owned_items_resolve(self):
		found = resolve_items(self.owner, [self.tea.id, self.old.id, self.theirs.id, 424242])
		self.assertEqual(list(found), [self.tea.id])
		self.assertEqual(found[self.tea.id].price, Decimal('10.00'))

	def test_empty_request(self):
		self.assertEqual(resolve_items(self.owner, []), {})


@override_settings(ALLOWED_HOSTS=['testserver', 'localhost', '127.0.0.1'])
class ItemApiTests(TestCase):
	@classmethod
	def setUpTestData(cls):
		User = get_user_model()
		cls.owner = User.objects.create_user(username='menu_owner', password='12345678')
		cls.other = User.objects.create_user(username='menu_other', password='12345678')
		cls.theirs = Item.objects.create(owner=cls.other, name='Coffee', price=Decimal('20.00'))

	def setUp(self):
		self.client = APIClient()
		self.client.force_authenticate(user=self.owner)

	def test_create_and_list(self):
		res = self.client.post('/api/items/', data={'name': '  Samosa ', 'price': '12.50'}, format='json')
		self.assertEqual(res.status_code, 201)
		self.assertEqual(res.data['name'], 'Samosa')
		self.assertIsNone(res.data['image_url'])

		self.client.post('/api/items/', data={'name': 'Bonda', 'price': '10.00'}, format='json')

		res = self.client.get('/api/items/')
		self.assertEqual(res.status_code, 200)
		self.assertEqual([row['name'] for row in res.data], ['Bonda', 'Samosa'])

		res = self.client.get('/api/items/', {'search': 'sam'})
		self.assertEqual([row['name'] for row in res.data], ['Samosa'])

	def test_invalid_payloads(self):
		res = self.client.post('/api/items/', data={'name': '   ', 'price': '10.00'}, format='json')
		self.assertEqual(res.status_code, 400)
		res = self.client.post('/api/items/', data={'name': 'Tea', 'price': '-1'}, format='json')
		self.assertEqual(res.status_code, 400)

	def test_delete_is_soft(self):
		item = Item.objects.create(owner=self.owner, name='Tea', price=Decimal('10.00'))

		res = self.client.delete(f'/api/items/{item.id}/')
		self.assertEqual(res.status_code, 204)

		item.refresh_from_db()
		self.assertFalse(item.is_active)
		self.assertEqual(self.client.get('/api/items/').data, [])
		self.assertEqual(self.client.get(f'/api/items/{item.id}/').status_code, 404)

	def test_other_owners_items_are_hidden(self):
		res = self.client.get(f'/api/items/{self.theirs.id}/')
		self.assertEqual(res.status_code, 404)
		res = self.client.patch(f'/api/items/{self.theirs.id}/', data={'price': '1.00'}, format='json')
		self.assertEqual(res.status_code, 404)
