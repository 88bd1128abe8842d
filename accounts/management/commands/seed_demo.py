"""Seed a demo business with a small menu and a day of bills.

Creates (or reuses) a demo owner with a business profile, GST rate and
reports PIN, a catalog of items and a mix of draft, completed and PSG-marked
orders. Orders go through the normal order services, so numbers and totals
are exactly what the API would produce.

Usage:
  python manage.py seed_demo
  python manage.py seed_demo --orders 40 --reset --images --seed 7
"""

import hashlib
import random
from decimal import Decimal
from io import BytesIO

from django.contrib.auth import get_user_model
from django.core.files.base import ContentFile
from django.core.management.base import BaseCommand, CommandError
from django.db import transaction
from PIL import Image, ImageDraw

from accounts.models import BusinessProfile
from accounts.services import is_valid_pin_format, set_reports_pin
from items.models import Item
from orders import services as order_services
from orders.models import Order

MENU = [
    ('Masala Dosa', '60.00'),
    ('Plain Dosa', '45.00'),
    ('Idli (2 pcs)', '30.00'),
    ('Medu Vada', '35.00'),
    ('Pongal', '50.00'),
    ('Filter Coffee', '20.00'),
    ('Masala Tea', '15.00'),
    ('Lemon Rice', '55.00'),
    ('Curd Rice', '50.00'),
    ('Rava Kesari', '40.00'),
]


def _placeholder_image(name: str) -> ContentFile:
    """Flat-colour PNG tile with the item's initials."""
    digest = hashlib.sha1(name.encode('utf-8')).hexdigest()
    color = tuple(150 + int(digest[i:i + 2], 16) % 100 for i in (0, 2, 4))

    img = Image.new('RGB', (320, 320), color)
    draw = ImageDraw.Draw(img)
    initials = ''.join(word[0] for word in name.split()[:2]).upper()
    draw.text((140, 150), initials, fill=(40, 40, 40))

    buf = BytesIO()
    img.save(buf, format='PNG')
    return ContentFile(buf.getvalue(), name=f"{digest[:12]}.png")


class Command(BaseCommand):
    help = 'Create a demo owner with items and orders for local development.'

    def add_arguments(self, parser):
        parser.add_argument('--username', default='demo', help='Username of the demo owner.')
        parser.add_argument('--password', default='DemoPass123!', help='Password of the demo owner.')
        parser.add_argument('--pin', default='1234', help='Reports PIN to set (4 digits).')
        parser.add_argument('--gst', default='5.00', help='GST percentage for the business profile.')
        parser.add_argument('--orders', type=int, default=25, help='Number of orders to create.')
        parser.add_argument('--seed', type=int, default=None, help='Random seed for reproducible data.')
        parser.add_argument('--reset', action='store_true', help="Delete the demo owner's existing orders and items first.")
        parser.add_argument('--images', action='store_true', help='Attach generated placeholder images to items.')

    def handle(self, *args, **options):
        if options['orders'] < 0:
            raise CommandError('--orders must not be negative.')
        if not is_valid_pin_format(options['pin']):
            raise CommandError('--pin must be exactly 4 digits.')
        rng = random.Random(options['seed'])

        with transaction.atomic():
            owner = self._owner(options)
            if options['reset']:
                Order.objects.filter(owner=owner).delete()
                Item.objects.filter(owner=owner).delete()
                self.stdout.write(self.style.NOTICE(f"Cleared existing data for {owner.username}"))

            items = self._catalog(owner, with_images=options['images'])
            created = [self._order(owner, items, rng) for _ in range(options['orders'])]

        completed = sum(1 for order in created if order.is_completed)
        psg = sum(1 for order in created if order.psg_marked)
        self.stdout.write(self.style.SUCCESS(
            f"Seeded {len(items)} items and {len(created)} orders "
            f"({completed} completed, {psg} PSG) for '{owner.username}'."
        ))
        self.stdout.write(self.style.NOTICE(
            f"Login: {owner.username} / {options['password']} | reports PIN: {options['pin']}"
        ))

    def _owner(self, options):
        User = get_user_model()
        owner, created = User.objects.get_or_create(username=options['username'])
        if created:
            owner.set_password(options['password'])
            owner.save(update_fields=['password'])

        BusinessProfile.objects.update_or_create(
            user=owner,
            defaults={
                'business_name': 'Demo Tiffin Centre',
                'business_category': 'Restaurant',
                'business_address': '12 MG Road, Bengaluru',
                'phone_number': '+919876543210',
                'gst_percentage': Decimal(options['gst']),
            },
        )
        set_reports_pin(owner, options['pin'])
        return owner

    def _catalog(self, owner, *, with_images=False):
        items = []
        for name, price in MENU:
            item, _ = Item.objects.get_or_create(
                owner=owner, name=name, defaults={'price': Decimal(price)},
            )
            if not item.is_active:
                item.is_active = True
                item.save(update_fields=['is_active', 'updated_at'])
            if with_images and not item.image:
                item.image.save(f"{name}.png", _placeholder_image(name), save=True)
            items.append(item)
        return items

    def _order(self, owner, items, rng):
        picks = rng.sample(items, k=rng.randint(1, min(4, len(items))))
        lines = [{'item_id': item.id, 'quantity': rng.randint(1, 4)} for item in picks]

        if rng.random() < 0.2:
            return order_services.create_order(owner, lines)

        return order_services.create_order(
            owner,
            lines,
            status=Order.Status.COMPLETED,
            payment_method=rng.choice(Order.PaymentMethod.values),
            psg_marked=rng.random() < 0.3,
        )
