"""Reports app tests."""

from datetime import timedelta
from decimal import Decimal

from django.contrib.auth import get_user_model
from django.test import TestCase, override_settings
from django.utils import timezone
from rest_framework.test import APIClient

from accounts.models import BusinessProfile
from accounts.services import set_reports_pin
from items.models import Item
from orders import services
from orders.models import Order
from reports import aggregation
from reports.exceptions import InvalidPin, InvalidPinFormat, PinNotConfigured
from reports.pin import verify_reports_pin


class ReportsTestCase(TestCase):
	@classmethod
	def setUpTestData(cls):
		User = get_user_model()
		cls.owner = User.objects.create_user(username='report_owner', password='12345678')
		cls.other = User.objects.create_user(username='report_other', password='12345678')
		BusinessProfile.objects.create(user=cls.owner, business_name='Dosa Corner')

		cls.dosa = Item.objects.create(owner=cls.owner, name='Dosa', price=Decimal('10.00'))
		cls.idli = Item.objects.create(owner=cls.owner, name='Idli', price=Decimal('20.00'))
		cls.vada = Item.objects.create(owner=cls.owner, name='Vada', price=Decimal('15.00'))
		cls.foreign = Item.objects.create(owner=cls.other, name='Poha', price=Decimal('12.00'))

	def completed(self, pairs, psg=False, payment_method=Order.PaymentMethod.CASH, owner=None):
		return services.create_order(
			owner or self.owner,
			[{'item_id': item.id, 'quantity': qty} for item, qty in pairs],
			status=Order.Status.COMPLETED,
			payment_method=payment_method,
			psg_marked=psg,
		)

	def move_to(self, order, when):
		Order.objects.filter(pk=order.pk).update(created_at=when)

	def today_window(self):
		start, end, _, _ = aggregation.resolve_date_window()
		return start, end


class PinVerificationTests(ReportsTestCase):
	def test_not_configured_is_checked_first(self):
		for pin in ('1234', 'abcd', None):
			with self.assertRaises(PinNotConfigured):
				verify_reports_pin(self.owner, pin)
		with self.assertRaises(PinNotConfigured):
			verify_reports_pin(self.other, '1234')

	def test_format_then_hash(self):
		set_reports_pin(self.owner, '4321')

		for pin in ('123', '12345', '12a4', ' 432', None, 4321):
			with self.assertRaises(InvalidPinFormat):
				verify_reports_pin(self.owner, pin)
		with self.assertRaises(InvalidPin):
			verify_reports_pin(self.owner, '1234')

		verify_reports_pin(self.owner, '4321')

	def test_pin_is_stored_hashed(self):
		profile = set_reports_pin(self.owner, '4321')
		self.assertNotIn('4321', profile.reports_pin_hash)
		self.assertTrue(profile.has_reports_pin)


class AggregationTests(ReportsTestCase):
	def test_items_and_psg_aggregation(self):
		o1 = self.completed([(self.dosa, 2)])
		o2 = self.completed([(self.dosa, 3)], psg=True)

		start, end = self.today_window()
		items = aggregation.aggregate_items(self.owner, start, end)
		self.assertEqual(len(items), 1)
		self.assertEqual(items[0].item_id, self.dosa.id)
		self.assertEqual(items[0].item_name, 'Dosa')
		self.assertEqual(items[0].total_quantity, 5)
		self.assertEqual(items[0].total_amount, Decimal('50.00'))
		self.assertEqual(items[0].order_count, 2)
		self.assertEqual(items[0].average_price, Decimal('10.00'))

		psg = aggregation.aggregate_psg(self.owner, start, end)
		self.assertEqual(len(psg['items']), 1)
		self.assertEqual(psg['items'][0].total_quantity, 3)
		self.assertEqual(psg['items'][0].total_amount, Decimal('30.00'))
		self.assertEqual([o.order_id for o in psg['items'][0].orders], [o2.id])
		self.assertEqual(psg['items'][0].orders[0].order_number, o2.order_number)
		self.assertEqual(psg['summary'], {
			'total_orders': 1,
			'total_items': 1,
			'total_quantity': 3,
			'total_amount': Decimal('30.00'),
		})
		self.assertNotIn(o1.id, [o.order_id for o in psg['items'][0].orders])

	def test_drafts_other_owners_and_out_of_window_orders_are_ignored(self):
		services.create_order(self.owner, [{'item_id': self.dosa.id, 'quantity': 9}], psg_marked=True)
		self.completed([(self.foreign, 4)], owner=self.other)
		old = self.completed([(self.dosa, 7)], psg=True)
		self.move_to(old, timezone.now() - timedelta(days=3))
		self.completed([(self.dosa, 1)], psg=True)

		start, end = self.today_window()
		items = aggregation.aggregate_items(self.owner, start, end)
		self.assertEqual([(a.item_id, a.total_quantity) for a in items], [(self.dosa.id, 1)])
		self.assertEqual(aggregation.aggregate_psg(self.owner, start, end)['summary']['total_orders'], 1)

	def test_window_bounds_are_inclusive(self):
		order = self.completed([(self.dosa, 1)])
		start, end = self.today_window()

		self.move_to(order, start)
		self.assertEqual(len(aggregation.aggregate_items(self.owner, start, end)), 1)
		self.move_to(order, end)
		self.assertEqual(len(aggregation.aggregate_items(self.owner, start, end)), 1)
		self.move_to(order, end + timedelta(microseconds=1))
		self.assertEqual(aggregation.aggregate_items(self.owner, start, end), [])

	def test_average_price_is_a_plain_mean_of_line_prices(self):
		self.completed([(self.dosa, 1)])
		Item.objects.filter(pk=self.dosa.pk).update(price=Decimal('20.00'))
		self.completed([(self.dosa, 9)])

		start, end = self.today_window()
		aggregate = aggregation.aggregate_items(self.owner, start, end)[0]
		self.assertEqual(aggregate.total_amount, Decimal('190.00'))
		self.assertEqual(aggregate.average_price, Decimal('15.00'))

	def test_sorted_by_quantity_with_stable_ties(self):
		self.completed([(self.idli, 2), (self.vada, 2)])
		self.completed([(self.dosa, 5)])

		start, end = self.today_window()
		items = aggregation.aggregate_items(self.owner, start, end)
		self.assertEqual([a.item_id for a in items], [self.dosa.id, self.idli.id, self.vada.id])

	def test_item_filter_and_top_items(self):
		self.completed([(self.idli, 1), (self.vada, 3), (self.dosa, 2)])

		start, end = self.today_window()
		filtered = aggregation.aggregate_items(self.owner, start, end, item_id=self.idli.id)
		self.assertEqual([a.item_id for a in filtered], [self.idli.id])

		top = aggregation.top_selling_items(self.owner, start, end, limit=2)
		self.assertEqual([a.item_id for a in top], [self.vada.id, self.dosa.id])

	def test_psg_item_details(self):
		first = self.completed([(self.dosa, 2), (self.idli, 1)], psg=True)
		second = self.completed([(self.dosa, 3)], psg=True, payment_method=Order.PaymentMethod.ONLINE)
		self.completed([(self.dosa, 10)])

		start, end = self.today_window()
		details = aggregation.psg_item_details(self.owner, self.dosa, start, end)
		self.assertEqual(details.total_quantity, 5)
		self.assertEqual(details.total_amount, Decimal('50.00'))
		self.assertEqual(details.order_count, 2)
		self.assertEqual(details.average_quantity, Decimal('2.5'))
		self.assertEqual({row['order_id'] for row in details.orders}, {first.id, second.id})

	def test_daily_totals(self):
		today = self.completed([(self.dosa, 1)])
		self.completed([(self.idli, 1)])
		yesterday = self.completed([(self.vada, 2)])
		self.move_to(yesterday, today.created_at - timedelta(days=1))

		start, end, _, _ = aggregation.resolve_date_window(default_days=30)
		rows = aggregation.daily_totals(self.owner, start, end)
		self.assertEqual([row['order_count'] for row in rows], [1, 2])
		self.assertEqual(rows[-1]['period'], timezone.localdate())
		self.assertEqual(rows[-1]['total_amount'], Decimal('30.00'))

		with self.assertRaises(ValueError):
			aggregation.daily_totals(self.owner, start, end, 'year')


@override_settings(ALLOWED_HOSTS=['testserver', 'localhost', '127.0.0.1'])
class ReportsApiTests(ReportsTestCase):
	def setUp(self):
		self.client = APIClient()
		self.client.force_authenticate(user=self.owner)

	def test_reports_without_configured_pin_return_404(self):
		res = self.client.get('/api/reports/items/', HTTP_X_REPORTS_PIN='1234')
		self.assertEqual(res.status_code, 404)
		self.assertEqual(res.data['code'], 'pin_not_configured')

	def test_pin_is_required_and_checked(self):
		set_reports_pin(self.owner, '2468')

		res = self.client.get('/api/reports/items/')
		self.assertEqual(res.status_code, 400)
		self.assertEqual(res.data['code'], 'invalid_pin_format')

		res = self.client.get('/api/reports/items/', HTTP_X_REPORTS_PIN='1111')
		self.assertEqual(res.status_code, 403)
		self.assertEqual(res.data['code'], 'invalid_pin')

		res = self.client.get('/api/reports/items/', {'pin': '2468'})
		self.assertEqual(res.status_code, 200)

	def test_verify_pin_endpoint(self):
		set_reports_pin(self.owner, '2468')

		res = self.client.post('/api/reports/verify-pin/', {'pin': '2468'}, format='json')
		self.assertEqual(res.status_code, 200)

		res = self.client.post('/api/reports/verify-pin/', {'pin': '0000'}, format='json')
		self.assertEqual(res.status_code, 403)

	def test_item_report(self):
		set_reports_pin(self.owner, '2468')
		self.completed([(self.dosa, 2)])
		self.completed([(self.dosa, 3)], psg=True)

		res = self.client.get('/api/reports/items/', HTTP_X_REPORTS_PIN='2468')
		self.assertEqual(res.status_code, 200)
		self.assertEqual(res.data['item_reports'][0]['total_quantity'], 5)
		self.assertEqual(res.data['item_reports'][0]['total_amount'], '50.00')
		self.assertEqual(res.data['item_reports'][0]['order_count'], 2)
		self.assertEqual(res.data['summary']['total_items'], 1)
		self.assertEqual(res.data['date_range']['from'], timezone.localdate().isoformat())

	def test_order_report_summary_and_breakdown(self):
		set_reports_pin(self.owner, '2468')
		self.completed([(self.dosa, 2)])
		self.completed([(self.idli, 1)], payment_method=Order.PaymentMethod.ONLINE)
		services.create_order(self.owner, [{'item_id': self.vada.id, 'quantity': 1}])

		res = self.client.get('/api/reports/orders/', HTTP_X_REPORTS_PIN='2468')
		self.assertEqual(res.status_code, 200)
		self.assertEqual(res.data['count'], 2)
		self.assertEqual(res.data['summary']['total_orders'], 2)
		self.assertEqual(res.data['summary']['total_amount'], '40.00')
		breakdown = {row['payment_method']: row for row in res.data['payment_breakdown']}
		self.assertEqual(breakdown['cash']['amount'], '20.00')
		self.assertEqual(breakdown['online']['count'], 1)

		res = self.client.get('/api/reports/orders/', {'payment_method': 'online'}, HTTP_X_REPORTS_PIN='2468')
		self.assertEqual(res.data['count'], 1)

	def test_invalid_date_range_returns_400(self):
		set_reports_pin(self.owner, '2468')
		res = self.client.get('/api/reports/items/', {'from_date': '2024-02-02', 'to_date': '2024-02-01'}, HTTP_X_REPORTS_PIN='2468')
		self.assertEqual(res.status_code, 400)
		self.assertEqual(res.data['code'], 'invalid')

	def test_daily_and_top_items(self):
		set_reports_pin(self.owner, '2468')
		self.completed([(self.dosa, 2), (self.idli, 4)])

		res = self.client.get('/api/reports/daily/', {'group_by': 'month'}, HTTP_X_REPORTS_PIN='2468')
		self.assertEqual(res.status_code, 200)
		self.assertEqual(res.data['group_by'], 'month')
		self.assertEqual(len(res.data['daily_reports']), 1)
		self.assertEqual(res.data['daily_reports'][0]['total_amount'], '100.00')

		res = self.client.get('/api/reports/top-items/', {'limit': 1}, HTTP_X_REPORTS_PIN='2468')
		self.assertEqual(res.status_code, 200)
		self.assertEqual([row['item_name'] for row in res.data['top_items']], ['Idli'])

	def test_psg_endpoints(self):
		set_reports_pin(self.owner, '2468')
		self.completed([(self.dosa, 2)])
		psg_order = self.completed([(self.dosa, 3)], psg=True)

		res = self.client.get('/api/reports/psg/reports/', HTTP_X_REPORTS_PIN='2468')
		self.assertEqual(res.status_code, 200)
		self.assertEqual(res.data['summary']['total_orders'], 1)
		self.assertEqual(res.data['psg_items'][0]['total_amount'], '30.00')
		self.assertEqual(res.data['psg_items'][0]['orders'][0]['order_number'], psg_order.order_number)

		res = self.client.get('/api/reports/psg/orders/', HTTP_X_REPORTS_PIN='2468')
		self.assertEqual(res.status_code, 200)
		self.assertEqual(res.data['count'], 1)
		self.assertEqual(res.data['results'][0]['id'], psg_order.id)

		res = self.client.get(f'/api/reports/psg/items/{self.dosa.id}/', HTTP_X_REPORTS_PIN='2468')
		self.assertEqual(res.status_code, 200)
		self.assertEqual(res.data['statistics']['total_quantity'], 3)
		self.assertEqual(res.data['statistics']['average_quantity'], '3.00')

	def test_psg_item_details_for_unknown_item_is_404(self):
		set_reports_pin(self.owner, '2468')
		res = self.client.get(f'/api/reports/psg/items/{self.foreign.id}/', HTTP_X_REPORTS_PIN='2468')
		self.assertEqual(res.status_code, 404)
		self.assertEqual(res.data['code'], 'not_found')
