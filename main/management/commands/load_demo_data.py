"""
Django management command to load demo data for the POS application.
Creates a super admin, a demo store with its store admin and a cashier,
categories, products, a few invoices and expenses.
"""
import random
from datetime import timedelta
from decimal import Decimal

from django.core.management.base import BaseCommand
from django.db import transaction
from django.utils import timezone


CATEGORIES = [
    {'name': 'Groceries', 'default_gst': Decimal('5'), 'default_discount': Decimal('0')},
    {'name': 'Beverages', 'default_gst': Decimal('12'), 'default_discount': Decimal('5')},
    {'name': 'Personal Care', 'default_gst': Decimal('18'), 'default_discount': Decimal('0')},
    {'name': 'Electronics', 'default_gst': Decimal('18'), 'default_discount': Decimal('10'), 'low_stock_threshold': 3},
]

PRODUCTS = [
    ('Groceries', 'Basmati Rice 5kg', 'GRO-001', Decimal('650.00'), 40, None),
    ('Groceries', 'Toor Dal 1kg', 'GRO-002', Decimal('160.00'), 60, None),
    ('Groceries', 'Sunflower Oil 1L', 'GRO-003', Decimal('145.00'), 8, None),
    ('Beverages', 'Masala Chai 250g', 'BEV-001', Decimal('120.00'), 35, None),
    ('Beverages', 'Cold Coffee 200ml', 'BEV-002', Decimal('45.00'), 100, Decimal('28')),
    ('Personal Care', 'Herbal Soap', 'PC-001', Decimal('35.00'), 150, None),
    ('Personal Care', 'Toothpaste 150g', 'PC-002', Decimal('95.00'), 5, None),
    ('Electronics', 'USB-C Cable', 'EL-001', Decimal('299.00'), 20, None),
    ('Electronics', 'Power Bank 10000mAh', 'EL-002', Decimal('1499.00'), 2, None),
]


class Command(BaseCommand):
    help = 'Load demo data for POS application (store, users, catalog, invoices, expenses)'

    def add_arguments(self, parser):
        parser.add_argument(
            '--username',
            type=str,
            default='superadmin',
            help='Super admin username (default: superadmin)',
        )
        parser.add_argument(
            '--password',
            type=str,
            default='Admin1234@',
            help='Super admin password (default: Admin1234@)',
        )
        parser.add_argument(
            '--invoices',
            type=int,
            default=10,
            help='Number of demo invoices to create (default: 10)',
        )

    @transaction.atomic
    def handle(self, *args, **options):
        from expenses.models import Expense
        from financial.models import Partnership, PartnershipAsset
        from inventory.models import Category, Product
        from invoices.models import Invoice
        from invoices.services import checkout
        from stock.models import StockTransaction
        from stores.models import Store
        from stores.services import create_store
        from users.models import User

        username = options['username']
        password = options['password']

        self.stdout.write(self.style.NOTICE('Loading demo data...'))

        super_admin, created = User.objects.get_or_create(
            username=username,
            defaults={'role': User.Role.SUPER_ADMIN, 'display_name': 'Super Admin', 'is_staff': True},
        )
        super_admin.set_password(password)
        super_admin.save()
        self.stdout.write(self.style.SUCCESS(f'{"Created" if created else "Updated"} super admin: {username}'))

        store = Store.objects.filter(email='owner@demo-store.in').first()
        if store is None:
            store, admin_user, warnings = create_store({
                'name': 'Demo Kirana Store',
                'owner_name': 'Asha Verma',
                'email': 'owner@demo-store.in',
                'mobile': '9876543210',
                'gst_number': '29ABCDE1234F1Z5',
                'address': '12 MG Road, Bengaluru',
                'primary_upi_id': 'demostore@upi',
                'active_upi_type': Store.UpiType.PRIMARY,
                'global_discount': Decimal('2.00'),
            })
            for warning in warnings:
                self.stdout.write(self.style.WARNING(warning))
            if admin_user:
                self.stdout.write(self.style.SUCCESS(f'Created store admin: {admin_user.username} / 9876543210'))
            self.stdout.write(self.style.SUCCESS(f'Created store: {store.name}'))
        else:
            self.stdout.write(f'Store already exists: {store.name}')

        cashier, created = User.objects.get_or_create(
            username='cashier@demo-store.in',
            defaults={'role': User.Role.CASHIER, 'store': store, 'display_name': 'Ravi'},
        )
        if created:
            cashier.set_password('Cashier1234@')
            cashier.save()
            self.stdout.write(self.style.SUCCESS('Created cashier: cashier@demo-store.in / Cashier1234@'))

        categories = {}
        for data in CATEGORIES:
            data = dict(data)
            category, _ = Category.objects.get_or_create(store=store, name=data.pop('name'), defaults=data)
            categories[category.name] = category

        for category_name, name, sku, price, stock_qty, tax_override in PRODUCTS:
            product, created = Product.objects.get_or_create(
                store=store,
                sku=sku,
                defaults={
                    'category': categories[category_name],
                    'name': name,
                    'price': price,
                    'stock_qty': stock_qty,
                    'tax_override': tax_override,
                },
            )
            if created:
                StockTransaction.objects.create(
                    store=store,
                    product=product,
                    delta=stock_qty,
                    quantity_before=0,
                    quantity_after=stock_qty,
                    reason=StockTransaction.Reason.MANUAL,
                    notes='Opening stock',
                    performed_by=super_admin,
                )

        products = list(Product.objects.filter(store=store, stock_qty__gt=10))
        for _ in range(options['invoices'] if products else 0):
            picked = random.sample(products, k=min(len(products), random.randint(1, 3)))
            checkout(
                store,
                cashier,
                [{'product_id': product.pk, 'quantity': random.randint(1, 3)} for product in picked],
                payment_method=random.choice(Invoice.PaymentMethod.values),
            )

        today = timezone.localdate()
        for days_ago, title, amount, category in [
            (1, 'Shop rent', Decimal('25000.00'), 'Rent'),
            (3, 'Electricity bill', Decimal('3200.00'), 'Utilities'),
            (5, 'Cleaning supplies', Decimal('450.00'), 'Supplies'),
        ]:
            Expense.objects.get_or_create(
                store=store,
                title=title,
                defaults={
                    'amount': amount,
                    'expense_date': today - timedelta(days=days_ago),
                    'category': category,
                    'created_by': super_admin,
                },
            )

        partnership, created = Partnership.objects.get_or_create(
            store=store,
            partner_name='Asha Verma',
            defaults={'cash_investment': Decimal('200000.00'), 'share_percent': Decimal('100.00')},
        )
        if created:
            PartnershipAsset.objects.create(partnership=partnership, name='Shop fittings', asset_value=Decimal('50000.00'))

        self.stdout.write('')
        self.stdout.write(self.style.SUCCESS('=' * 60))
        self.stdout.write(self.style.SUCCESS('   DEMO DATA LOADED SUCCESSFULLY!'))
        self.stdout.write(self.style.SUCCESS('=' * 60))
        self.stdout.write(f'  Store: {store.name} ({store.pk})')
        self.stdout.write(f'  Categories: {Category.objects.filter(store=store).count()}')
        self.stdout.write(f'  Products: {Product.objects.filter(store=store).count()}')
        self.stdout.write(f'  Expenses: {Expense.objects.filter(store=store).count()}')
        self.stdout.write(f'  Super admin: {username} / {password}')
        self.stdout.write(self.style.SUCCESS('=' * 60))
