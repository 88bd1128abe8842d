"""Orders app tests."""

import re
from datetime import date
from decimal import Decimal
from unittest import mock

from django.contrib.auth import get_user_model
from django.test import SimpleTestCase, TestCase, override_settings
from django.utils import timezone
from rest_framework.exceptions import ValidationError
from rest_framework.test import APIClient

from accounts.models import BusinessProfile
from items.models import Item
from orders import services
from orders.exceptions import (
	AllocationExhausted,
	InvalidItemReference,
	InvalidStatusTransition,
	NotDeletable,
	OrderNotFound,
	PaymentMethodRequired,
)
from orders.models import Order, OrderLine
from orders.numbering import fallback_order_number, format_order_number, next_order_number
from orders.pricing import price_lines


ORDER_NUMBER_RE = re.compile(r'^FN-[0-9]{8}-[0-9]{6}$')


class PricingTests(SimpleTestCase):
	def test_two_lines_at_twelve_percent(self):
		result = price_lines([(Decimal('25.00'), 2), (Decimal('45.00'), 2)], 12)
		self.assertEqual(result.subtotal, Decimal('140.00'))
		self.assertEqual(result.gst_amount, Decimal('16.80'))
		self.assertEqual(result.cgst, Decimal('8.40'))
		self.assertEqual(result.sgst, Decimal('8.40'))
		self.assertEqual(result.grand_total, Decimal('156.80'))

	def test_missing_zero_or_negative_rate_means_no_tax(self):
		for rate in (None, 0, Decimal('0.00'), -5):
			result = price_lines([(Decimal('99.99'), 3)], rate)
			self.assertEqual(result.gst_amount, Decimal('0.00'))
			self.assertEqual(result.cgst, Decimal('0.00'))
			self.assertEqual(result.grand_total, result.subtotal)

	def test_empty_lines_price_to_zero(self):
		result = price_lines([], 18)
		self.assertEqual(result.as_dict(), {
			'subtotal': Decimal('0.00'),
			'gst_amount': Decimal('0.00'),
			'cgst': Decimal('0.00'),
			'sgst': Decimal('0.00'),
			'grand_total': Decimal('0.00'),
		})

	def test_rounding_is_half_up_at_output(self):
		# 33.33 * 18% = 5.9994 -> 6.00, halves 2.9997 -> 3.00
		result = price_lines([(Decimal('11.11'), 3)], 18)
		self.assertEqual(result.subtotal, Decimal('33.33'))
		self.assertEqual(result.gst_amount, Decimal('6.00'))
		self.assertEqual(result.cgst, result.sgst)
		self.assertEqual(result.grand_total, result.subtotal + result.gst_amount)

	def test_grand_total_is_sum_of_rounded_parts(self):
		# 0.004 and its 100% tax each round down to 0.00, so the total must too
		result = price_lines([(Decimal('0.004'), 1)], 100)
		self.assertEqual(result.subtotal, Decimal('0.00'))
		self.assertEqual(result.gst_amount, Decimal('0.00'))
		self.assertEqual(result.grand_total, Decimal('0.00'))

	def test_float_rates_are_taken_at_face_value(self):
		result = price_lines([('10.00', 1)], 2.5)
		self.assertEqual(result.gst_amount, Decimal('0.25'))
		self.assertEqual(result.grand_total, Decimal('10.25'))


class BaseOrderTestCase(TestCase):
	@classmethod
	def setUpTestData(cls):
		User = get_user_model()
		cls.owner = User.objects.create_user(username='cafe_owner', password='12345678')
		cls.other = User.objects.create_user(username='other_owner', password='12345678')
		BusinessProfile.objects.create(user=cls.owner, business_name='Cafe', gst_percentage=Decimal('12.00'))

		cls.tea = Item.objects.create(owner=cls.owner, name='Masala Tea', price=Decimal('25.00'))
		cls.sandwich = Item.objects.create(owner=cls.owner, name='Sandwich', price=Decimal('45.00'))
		cls.retired = Item.objects.create(owner=cls.owner, name='Old Special', price=Decimal('60.00'), is_active=False)
		cls.foreign = Item.objects.create(owner=cls.other, name='Coffee', price=Decimal('30.00'))

	def lines(self, *pairs):
		return [{'item_id': item.id, 'quantity': qty} for item, qty in pairs]


class OrderNumberTests(BaseOrderTestCase):
	def test_first_number_of_the_day(self):
		day = date(2024, 3, 5)
		self.assertEqual(next_order_number(day), 'FN-20240305-000001')

	def test_numbers_increase_within_a_day(self):
		day = timezone.localdate()
		first = services.create_order(self.owner, self.lines((self.tea, 1)))
		second = services.create_order(self.owner, self.lines((self.tea, 1)))

		self.assertRegex(first.order_number, ORDER_NUMBER_RE)
		self.assertEqual(first.order_number, format_order_number(day, 1))
		self.assertEqual(second.order_number, format_order_number(day, 2))

	def test_sequence_is_shared_across_owners(self):
		services.create_order(self.owner, self.lines((self.tea, 1)))
		other = services.create_order(self.other, [{'item_id': self.foreign.id, 'quantity': 1}])
		self.assertTrue(other.order_number.endswith('-000002'))

	def test_other_days_and_fallback_numbers_do_not_affect_sequence(self):
		day = date(2024, 3, 5)
		Order.objects.create(owner=self.owner, order_number=format_order_number(date(2024, 3, 4), 41))
		Order.objects.create(owner=self.owner, order_number=fallback_order_number(day))
		self.assertEqual(next_order_number(day), 'FN-20240305-000001')

		Order.objects.create(owner=self.owner, order_number=format_order_number(day, 9))
		self.assertEqual(next_order_number(day), 'FN-20240305-000010')

	@override_settings(ORDER_NUMBER_PREFIX='XY')
	def test_prefix_is_configurable(self):
		self.assertEqual(next_order_number(date(2024, 1, 1)), 'XY-20240101-000001')

	def test_collision_is_retried_with_a_fresh_number(self):
		taken = services.create_order(self.owner, self.lines((self.tea, 1))).order_number
		fresh = format_order_number(timezone.localdate(), 7)

		with mock.patch('orders.services.next_order_number', side_effect=[taken, taken, fresh]) as allocator:
			order = services.create_order(self.owner, self.lines((self.sandwich, 2)))

		self.assertEqual(allocator.call_count, 3)
		self.assertEqual(order.order_number, fresh)
		self.assertEqual(order.lines.count(), 1)

	@override_settings(ORDER_NUMBER_MAX_ATTEMPTS=3)
	def test_fallback_number_after_repeated_collisions(self):
		taken = services.create_order(self.owner, self.lines((self.tea, 1))).order_number

		with mock.patch('orders.services.next_order_number', return_value=taken) as allocator:
			order = services.create_order(self.owner, self.lines((self.tea, 2)))

		self.assertEqual(allocator.call_count, 3)
		self.assertNotEqual(order.order_number, taken)
		self.assertTrue(order.order_number.startswith(f"FN-{timezone.localdate():%Y%m%d}-"))
		self.assertNotRegex(order.order_number, ORDER_NUMBER_RE)

	@override_settings(ORDER_NUMBER_MAX_ATTEMPTS=2)
	def test_allocation_exhausted_creates_nothing(self):
		taken = services.create_order(self.owner, self.lines((self.tea, 1))).order_number

		with mock.patch('orders.services.next_order_number', return_value=taken), \
				mock.patch('orders.services.fallback_order_number', return_value=taken):
			with self.assertRaises(AllocationExhausted):
				services.create_order(self.owner, self.lines((self.sandwich, 1)))

		self.assertEqual(Order.objects.count(), 1)
		self.assertEqual(OrderLine.objects.count(), 1)


class OrderLifecycleTests(BaseOrderTestCase):
	def test_create_draft_prices_lines_with_business_rate(self):
		order = services.create_order(
			self.owner,
			self.lines((self.tea, 2), (self.sandwich, 2)),
			customer_phone='+919876543210',
		)

		order.refresh_from_db()
		self.assertEqual(order.status, Order.Status.DRAFT)
		self.assertIsNone(order.payment_method)
		self.assertEqual(order.gst_rate, Decimal('12.00'))
		self.assertEqual(order.subtotal, Decimal('140.00'))
		self.assertEqual(order.gst_amount, Decimal('16.80'))
		self.assertEqual(order.cgst, Decimal('8.40'))
		self.assertEqual(order.sgst, Decimal('8.40'))
		self.assertEqual(order.grand_total, Decimal('156.80'))
		self.assertFalse(order.psg_marked)
		self.assertFalse(order.printed)

		lines = list(order.lines.values_list('item_id', 'quantity', 'unit_price', 'line_total'))
		self.assertEqual(lines, [
			(self.tea.id, 2, Decimal('25.00'), Decimal('50.00')),
			(self.sandwich.id, 2, Decimal('45.00'), Decimal('90.00')),
		])

	def test_line_prices_are_snapshots(self):
		order = services.create_order(self.owner, self.lines((self.tea, 1)))
		Item.objects.filter(pk=self.tea.pk).update(price=Decimal('99.00'))

		line = order.lines.get()
		self.assertEqual(line.unit_price, Decimal('25.00'))

	def test_no_business_profile_means_no_tax(self):
		order = services.create_order(self.other, [{'item_id': self.foreign.id, 'quantity': 2}])
		self.assertIsNone(order.gst_rate)
		self.assertEqual(order.gst_amount, Decimal('0.00'))
		self.assertEqual(order.grand_total, Decimal('60.00'))

	def test_repeated_item_ids_are_rejected(self):
		with self.assertRaises(InvalidItemReference):
			services.create_order(self.owner, self.lines((self.tea, 1), (self.tea, 2)))
		self.assertFalse(Order.objects.exists())

		order = services.create_order(self.owner, self.lines((self.tea, 1)))
		with self.assertRaises(InvalidItemReference):
			services.update_order(order.id, self.owner, {'lines': self.lines((self.tea, 1), (self.tea, 2))})
		self.assertEqual(order.lines.count(), 1)

	def test_completed_order_requires_payment_method(self):
		with self.assertRaises(PaymentMethodRequired):
			services.create_order(self.owner, self.lines((self.tea, 1)), status=Order.Status.COMPLETED)
		self.assertFalse(Order.objects.exists())

		order = services.create_order(
			self.owner, self.lines((self.tea, 1)),
			status=Order.Status.COMPLETED, payment_method=Order.PaymentMethod.CASH, psg_marked=True,
		)
		self.assertTrue(order.is_completed)
		self.assertTrue(order.psg_marked)

	def test_inactive_or_foreign_items_are_rejected(self):
		for item in (self.retired, self.foreign):
			with self.assertRaises(InvalidItemReference):
				services.create_order(self.owner, self.lines((self.tea, 1), (item, 1)))
		with self.assertRaises(InvalidItemReference):
			services.create_order(self.owner, [{'item_id': 999999, 'quantity': 1}])

		self.assertFalse(Order.objects.exists())
		self.assertFalse(OrderLine.objects.exists())

	def test_malformed_lines_are_rejected(self):
		bad_inputs = [
			[],
			[{'item_id': self.tea.id, 'quantity': 0}],
			[{'item_id': self.tea.id, 'quantity': 1.5}],
			[{'item_id': True, 'quantity': 1}],
			[{'quantity': 1}],
		]
		for lines in bad_inputs:
			with self.assertRaises(ValidationError):
				services.create_order(self.owner, lines)
		self.assertFalse(Order.objects.exists())

	def test_update_replaces_lines_and_reprices(self):
		order = services.create_order(self.owner, self.lines((self.tea, 2), (self.sandwich, 2)))
		old_line_ids = set(order.lines.values_list('id', flat=True))

		order = services.update_order(order.id, self.owner, {'lines': self.lines((self.sandwich, 1))})

		lines = list(order.lines.all())
		self.assertEqual(len(lines), 1)
		self.assertEqual(lines[0].item_id, self.sandwich.id)
		self.assertFalse(old_line_ids & {line.id for line in lines})
		self.assertEqual(order.subtotal, Decimal('45.00'))
		self.assertEqual(order.gst_amount, Decimal('5.40'))
		self.assertEqual(order.grand_total, Decimal('50.40'))

	def test_update_uses_current_tax_rate(self):
		order = services.create_order(self.owner, self.lines((self.tea, 4)))
		BusinessProfile.objects.filter(user=self.owner).update(gst_percentage=Decimal('5.00'))

		order = services.update_order(order.id, self.owner, {'customer_phone': None})
		self.assertEqual(order.gst_amount, Decimal('12.00'))

		order = services.update_order(order.id, self.owner, {'lines': self.lines((self.tea, 4))})
		self.assertEqual(order.gst_rate, Decimal('5.00'))
		self.assertEqual(order.gst_amount, Decimal('5.00'))

	def test_update_without_lines_keeps_lines(self):
		order = services.create_order(self.owner, self.lines((self.tea, 2)))
		line_ids = list(order.lines.values_list('id', flat=True))

		order = services.update_order(order.id, self.owner, {'psg_marked': True, 'customer_phone': '+919876543210'})

		self.assertTrue(order.psg_marked)
		self.assertEqual(order.customer_phone, '+919876543210')
		self.assertEqual(list(order.lines.values_list('id', flat=True)), line_ids)

	def test_completing_a_draft_needs_payment_method(self):
		order = services.create_order(self.owner, self.lines((self.tea, 1)))

		with self.assertRaises(PaymentMethodRequired):
			services.update_order(order.id, self.owner, {'status': Order.Status.COMPLETED})
		order.refresh_from_db()
		self.assertTrue(order.is_draft)

		order = services.update_order(order.id, self.owner, {
			'status': Order.Status.COMPLETED,
			'payment_method': Order.PaymentMethod.ONLINE,
		})
		self.assertTrue(order.is_completed)

		with self.assertRaises(PaymentMethodRequired):
			services.update_order(order.id, self.owner, {'payment_method': None})

	def test_completed_orders_can_still_be_repriced(self):
		order = services.create_order(
			self.owner, self.lines((self.tea, 1)),
			status=Order.Status.COMPLETED, payment_method=Order.PaymentMethod.CASH,
		)
		order = services.update_order(order.id, self.owner, {'lines': self.lines((self.tea, 3))})
		self.assertTrue(order.is_completed)
		self.assertEqual(order.subtotal, Decimal('75.00'))

	def test_completed_order_cannot_return_to_draft(self):
		order = services.create_order(
			self.owner, self.lines((self.tea, 1)),
			status=Order.Status.COMPLETED, payment_method=Order.PaymentMethod.CASH,
		)

		with self.assertRaises(InvalidStatusTransition):
			services.update_order(order.id, self.owner, {'status': Order.Status.DRAFT})
		order.refresh_from_db()
		self.assertTrue(order.is_completed)

		with self.assertRaises(NotDeletable):
			services.delete_order(order.id, self.owner)
		self.assertTrue(Order.objects.filter(pk=order.pk).exists())

	def test_failed_line_update_leaves_order_untouched(self):
		order = services.create_order(self.owner, self.lines((self.tea, 2)))

		with self.assertRaises(InvalidItemReference):
			services.update_order(order.id, self.owner, {'lines': self.lines((self.retired, 1))})

		order.refresh_from_db()
		self.assertEqual(order.subtotal, Decimal('50.00'))
		self.assertEqual(order.lines.get().item_id, self.tea.id)

	def test_unknown_patch_fields_are_rejected(self):
		order = services.create_order(self.owner, self.lines((self.tea, 1)))
		with self.assertRaises(ValidationError):
			services.update_order(order.id, self.owner, {'grand_total': '1.00'})

	def test_orders_are_private_to_their_owner(self):
		order = services.create_order(self.owner, self.lines((self.tea, 1)))

		with self.assertRaises(OrderNotFound):
			services.update_order(order.id, self.other, {'psg_marked': True})
		with self.assertRaises(OrderNotFound):
			services.delete_order(order.id, self.other)
		with self.assertRaises(OrderNotFound):
			services.get_order('not-a-number', self.owner)

	def test_only_drafts_can_be_deleted(self):
		draft = services.create_order(self.owner, self.lines((self.tea, 1), (self.sandwich, 1)))
		completed = services.create_order(
			self.owner, self.lines((self.tea, 1)),
			status=Order.Status.COMPLETED, payment_method=Order.PaymentMethod.CASH,
		)

		with self.assertRaises(NotDeletable):
			services.delete_order(completed.id, self.owner)
		self.assertTrue(Order.objects.filter(pk=completed.pk).exists())

		services.delete_order(draft.id, self.owner)
		self.assertFalse(Order.objects.filter(pk=draft.pk).exists())
		self.assertFalse(OrderLine.objects.filter(order_id=draft.pk).exists())

	def test_mark_printed_is_repeatable_on_completed_orders(self):
		order = services.create_order(
			self.owner, self.lines((self.tea, 1)),
			status=Order.Status.COMPLETED, payment_method=Order.PaymentMethod.CASH,
		)

		first = services.mark_printed(order.id, self.owner)
		self.assertTrue(first.printed)
		self.assertIsNotNone(first.printed_at)

		second = services.mark_printed(order.id, self.owner)
		self.assertTrue(second.printed)
		self.assertGreaterEqual(second.printed_at, first.printed_at)

	def test_mark_printed_rejects_drafts(self):
		order = services.create_order(self.owner, self.lines((self.tea, 1)))
		with self.assertRaises(OrderNotFound):
			services.mark_printed(order.id, self.owner)
		order.refresh_from_db()
		self.assertFalse(order.printed)


@override_settings(ALLOWED_HOSTS=['testserver', 'localhost', '127.0.0.1'])
class OrderApiTests(BaseOrderTestCase):
	def setUp(self):
		self.client = APIClient()
		self.client.force_authenticate(user=self.owner)

	def test_create_order_returns_201_with_totals(self):
		res = self.client.post('/api/orders/', data={
			'lines': self.lines((self.tea, 2), (self.sandwich, 2)),
			'customer_phone': '9876543210',
		}, format='json')

		self.assertEqual(res.status_code, 201)
		self.assertRegex(res.data['order_number'], ORDER_NUMBER_RE)
		self.assertEqual(res.data['status'], 'draft')
		self.assertEqual(res.data['customer_phone'], '+919876543210')
		self.assertEqual(res.data['grand_total'], '156.80')
		self.assertEqual([line['item_name'] for line in res.data['lines']], ['Masala Tea', 'Sandwich'])

	def test_create_completed_without_payment_method_returns_400(self):
		res = self.client.post('/api/orders/', data={
			'lines': self.lines((self.tea, 1)),
			'status': 'completed',
		}, format='json')

		self.assertEqual(res.status_code, 400)
		self.assertEqual(res.data['code'], 'payment_method_required')
		self.assertFalse(Order.objects.exists())

	def test_create_with_inactive_item_returns_400(self):
		res = self.client.post('/api/orders/', data={'lines': self.lines((self.retired, 1))}, format='json')
		self.assertEqual(res.status_code, 400)
		self.assertEqual(res.data['code'], 'invalid_item_reference')

	def test_create_with_empty_lines_returns_400(self):
		res = self.client.post('/api/orders/', data={'lines': []}, format='json')
		self.assertEqual(res.status_code, 400)
		self.assertIn('lines', res.data)

	def test_patch_updates_only_sent_fields(self):
		order = services.create_order(self.owner, self.lines((self.tea, 2)))

		res = self.client.patch(f'/api/orders/{order.id}/', data={
			'status': 'completed',
			'payment_method': 'cash',
		}, format='json')

		self.assertEqual(res.status_code, 200)
		self.assertEqual(res.data['status'], 'completed')
		self.assertEqual(res.data['subtotal'], '50.00')
		self.assertEqual(len(res.data['lines']), 1)

	def test_put_replaces_lines(self):
		order = services.create_order(self.owner, self.lines((self.tea, 2)))

		res = self.client.put(f'/api/orders/{order.id}/', data={'lines': self.lines((self.sandwich, 3))}, format='json')

		self.assertEqual(res.status_code, 200)
		self.assertEqual([line['item_id'] for line in res.data['lines']], [self.sandwich.id])
		self.assertEqual(res.data['subtotal'], '135.00')

	def test_delete_completed_returns_409(self):
		order = services.create_order(
			self.owner, self.lines((self.tea, 1)),
			status=Order.Status.COMPLETED, payment_method=Order.PaymentMethod.CASH,
		)
		res = self.client.delete(f'/api/orders/{order.id}/')
		self.assertEqual(res.status_code, 409)
		self.assertEqual(res.data['code'], 'not_deletable')

	def test_patch_completed_back_to_draft_returns_409(self):
		order = services.create_order(
			self.owner, self.lines((self.tea, 1)),
			status=Order.Status.COMPLETED, payment_method=Order.PaymentMethod.CASH,
		)
		res = self.client.patch(f'/api/orders/{order.id}/', {'status': 'draft'}, format='json')
		self.assertEqual(res.status_code, 409)
		self.assertEqual(res.data['code'], 'invalid_status_transition')

	def test_delete_draft_returns_204(self):
		order = services.create_order(self.owner, self.lines((self.tea, 1)))
		res = self.client.delete(f'/api/orders/{order.id}/')
		self.assertEqual(res.status_code, 204)
		self.assertFalse(Order.objects.exists())

	def test_print_endpoint(self):
		order = services.create_order(
			self.owner, self.lines((self.tea, 1)),
			status=Order.Status.COMPLETED, payment_method=Order.PaymentMethod.ONLINE,
		)
		res = self.client.post(f'/api/orders/{order.id}/print/')
		self.assertEqual(res.status_code, 200)
		self.assertTrue(res.data['printed'])

		res = self.client.post(f'/api/orders/{order.id}/print/')
		self.assertEqual(res.status_code, 200)

	def test_list_is_scoped_filtered_and_paginated(self):
		services.create_order(self.owner, self.lines((self.tea, 1)))
		services.create_order(
			self.owner, self.lines((self.tea, 1)),
			status=Order.Status.COMPLETED, payment_method=Order.PaymentMethod.CASH,
		)
		services.create_order(self.other, [{'item_id': self.foreign.id, 'quantity': 1}])

		res = self.client.get('/api/orders/')
		self.assertEqual(res.status_code, 200)
		self.assertEqual(res.data['count'], 2)

		res = self.client.get('/api/orders/', {'status': 'completed'})
		self.assertEqual(res.data['count'], 1)
		self.assertEqual(res.data['results'][0]['status'], 'completed')

	def test_other_owners_order_is_not_found(self):
		order = services.create_order(self.other, [{'item_id': self.foreign.id, 'quantity': 1}])
		res = self.client.get(f'/api/orders/{order.id}/')
		self.assertEqual(res.status_code, 404)
		self.assertEqual(res.data['code'], 'not_found')

	def test_requires_authentication(self):
		res = APIClient().get('/api/orders/')
		self.assertEqual(res.status_code, 401)
