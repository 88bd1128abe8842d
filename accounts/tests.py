"""Accounts app tests."""

from decimal import Decimal
from io import StringIO

from django.contrib.auth import get_user_model
from django.contrib.auth.hashers import check_password
from django.core.management import call_command
from django.core.management.base import CommandError
from django.test import SimpleTestCase, TestCase, override_settings
from rest_framework import serializers
from rest_framework.test import APIClient

from accounts.models import BusinessProfile
from accounts.services import get_pin_hash, get_tax_rate, is_valid_pin_format
from accounts.validators import normalize_phone, validate_gstin
from orders.models import Order


class ValidatorTests(SimpleTestCase):
	def test_phone_numbers_are_normalized_to_e164(self):
		self.assertEqual(normalize_phone('98765 43210'), '+919876543210')
		self.assertEqual(normalize_phone('+91 98765-43210'), '+919876543210')
		self.assertEqual(normalize_phone('0091 9876543210'), '+919876543210')
		self.assertIsNone(normalize_phone(''))
		self.assertIsNone(normalize_phone(None))

	def test_invalid_phone_is_rejected(self):
		with self.assertRaises(serializers.ValidationError):
			normalize_phone('12345')

	def test_gstin(self):
		self.assertEqual(validate_gstin('29abcde1234f1z5'), '29ABCDE1234F1Z5')
		self.assertIsNone(validate_gstin(''))
		with self.assertRaises(serializers.ValidationError):
			validate_gstin('29ABCDE1234F1X5')

	def test_pin_format(self):
		self.assertTrue(is_valid_pin_format('0007'))
		for pin in ('123', '12345', '12a4', '', None, 1234, '١٢٣٤'):
			self.assertFalse(is_valid_pin_format(pin))


class ProfileLookupTests(TestCase):
	@classmethod
	def setUpTestData(cls):
		cls.user = get_user_model().objects.create_user(username='lookup_user', password='12345678')

	def test_missing_profile(self):
		self.assertIsNone(get_tax_rate(self.user))
		self.assertIsNone(get_pin_hash(self.user))

	def test_rate_and_pin_hash(self):
		BusinessProfile.objects.create(user=self.user, gst_percentage=Decimal('18.00'))
		self.assertEqual(get_tax_rate(self.user), Decimal('18.00'))
		self.assertIsNone(get_pin_hash(self.user))


@override_settings(ALLOWED_HOSTS=['testserver', 'localhost', '127.0.0.1'])
class AccountsApiTests(TestCase):
	@classmethod
	def setUpTestData(cls):
		cls.user = get_user_model().objects.create_user(username='shop_owner', password='12345678')

	def setUp(self):
		self.client = APIClient()
		self.client.force_authenticate(user=self.user)

	def test_register_creates_user_and_profile(self):
		res = APIClient().post('/api/accounts/register/', data={
			'username': 'new.owner',
			'password': 'Str0ngPassw0rd',
			'email': 'Owner@Example.com ',
			'business_name': 'Chai Point',
		}, format='json')

		self.assertEqual(res.status_code, 201)
		self.assertNotIn('password', res.data)
		user = get_user_model().objects.get(username='new.owner')
		self.assertEqual(user.email, 'owner@example.com')
		self.assertEqual(user.business_profile.business_name, 'Chai Point')

	def test_register_rejects_bad_username(self):
		res = APIClient().post('/api/accounts/register/', data={
			'username': 'ab',
			'password': 'Str0ngPassw0rd',
		}, format='json')
		self.assertEqual(res.status_code, 400)
		self.assertIn('username', res.data)

	def test_login_returns_tokens(self):
		res = APIClient().post('/api/accounts/login/', data={'username': 'shop_owner', 'password': '12345678'}, format='json')
		self.assertEqual(res.status_code, 200)
		self.assertIn('access', res.data)
		self.assertIn('refresh', res.data)

	def test_profile_is_created_on_first_save(self):
		res = self.client.get('/api/accounts/business/me/')
		self.assertEqual(res.status_code, 200)
		self.assertIsNone(res.data['business_profile'])

		res = self.client.put('/api/accounts/business/me/', data={
			'business_name': 'Shop',
			'phone_number': '9876543210',
			'gstin_number': '29abcde1234f1z5',
			'gst_percentage': '12.00',
		}, format='json')

		self.assertEqual(res.status_code, 200)
		self.assertEqual(res.data['phone_number'], '+919876543210')
		self.assertEqual(res.data['gstin_number'], '29ABCDE1234F1Z5')
		self.assertFalse(res.data['has_reports_pin'])
		self.assertNotIn('reports_pin_hash', res.data)
		self.assertEqual(get_tax_rate(self.user), Decimal('12.00'))

	def test_profile_rejects_out_of_range_gst(self):
		res = self.client.patch('/api/accounts/business/me/', data={'gst_percentage': '120'}, format='json')
		self.assertEqual(res.status_code, 400)
		self.assertEqual(res.data['code'], 'invalid')

	def test_set_pin(self):
		res = self.client.post('/api/accounts/business/pin/', data={'pin': '12a4'}, format='json')
		self.assertEqual(res.status_code, 400)

		res = self.client.post('/api/accounts/business/pin/', data={'pin': '9876'}, format='json')
		self.assertEqual(res.status_code, 200)
		self.assertTrue(check_password('9876', get_pin_hash(self.user)))

		res = self.client.get('/api/accounts/business/me/')
		self.assertTrue(res.data['has_reports_pin'])


class SeedDemoCommandTests(TestCase):
	def test_seed_demo_creates_owner_items_and_orders(self):
		out = StringIO()
		call_command('seed_demo', '--orders', '6', '--seed', '3', stdout=out)

		owner = get_user_model().objects.get(username='demo')
		self.assertEqual(get_tax_rate(owner), Decimal('5.00'))
		self.assertTrue(check_password('1234', get_pin_hash(owner)))
		self.assertEqual(owner.items.count(), 10)
		self.assertEqual(Order.objects.filter(owner=owner).count(), 6)
		self.assertIn('Seeded 10 items and 6 orders', out.getvalue())

		call_command('seed_demo', '--orders', '2', '--reset', stdout=StringIO())
		self.assertEqual(Order.objects.filter(owner=owner).count(), 2)

	def test_seed_demo_rejects_bad_pin(self):
		with self.assertRaises(CommandError):
			call_command('seed_demo', '--pin', '12', stdout=StringIO())
