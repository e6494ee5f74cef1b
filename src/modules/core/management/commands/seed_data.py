from __future__ import annotations

from datetime import timedelta
from decimal import Decimal

from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand
from django.db import transaction
from django.utils import timezone

from modules.catalog.models import Category, MenuItem
from modules.delivery.models import DeliveryPerson
from modules.orders.constants import PICKUP_ADDRESS, DeliveryType, OrderStatus
from modules.orders.models import Order, OrderItem, OrderStatusHistory
from modules.orders.pricing import resolve_price
from modules.orders.validation import estimated_time

CATEGORIES = [
    # name, has_multiple_sizes, sold_by_dozen
    ("Pizza", True, False),
    ("Empanada", True, True),
]

MENU = [
    # name, ingredients, category, full, half, unit, available
    ("Muzzarella", "Salsa de tomate, muzzarella, aceitunas", "Pizza", "5800", "3200", None, True),
    ("Napolitana", "Salsa de tomate, muzzarella, rodajas de tomate, ajo, perejil", "Pizza", "6200", "3500", None, True),
    ("Fugazzeta", "Cebolla, muzzarella, aceitunas", "Pizza", "6200", "3500", None, False),
    ("Jamon y Morrones", "Salsa de tomate, muzzarella, jamón, morrones", "Pizza", "6800", "3800", None, True),
    ("Calabresa", "Salsa de tomate, muzzarella, longaniza", "Pizza", "7000", "4000", None, True),
    ("Empanada de Carne", "Carne picada, cebolla, huevo", "Empanada", "7200", "3800", "700", True),
    ("Empanada de Jamón y Queso", "Jamón, queso", "Empanada", "7000", "3700", "680", True),
    ("Empanada de Pollo", "Pollo, cebolla, morrón", "Empanada", "7000", "3700", "680", False),
    ("Empanada de Humita", "Choclo, salsa blanca, queso", "Empanada", "7000", "3700", "680", True),
]

DRIVERS = ["Juan", "Maria", "Pedro"]
DRIVER_PASSWORD = "123"

ORDERS = [
    # customer, phone, address, type, delay, status, driver, minutes ago, lines
    (
        "Lucia Fernandez", "1198765432", "Calle Falsa 123, Springfield",
        DeliveryType.ENVIO, 40, OrderStatus.ENTREGADO, "Juan", 10,
        [("Muzzarella", "entera", 1), ("Empanada de Jamón y Queso", "6", 1)],
    ),
    (
        "Carlos Rodriguez", "1122334455", "Av. Corrientes 1234, CABA",
        DeliveryType.ENVIO, 40, OrderStatus.NUEVO, "Juan", 5,
        [("Muzzarella", "entera", 1)],
    ),
    (
        "Laura Gomez", "1166778899", PICKUP_ADDRESS,
        DeliveryType.RETIRO, 30, OrderStatus.PREPARACION, None, 3,
        [("Napolitana", "entera", 1), ("Empanada de Jamón y Queso", "6", 1)],
    ),
    (
        "Ana Martinez", "1155443322", "Av. Santa Fe 4321, CABA",
        DeliveryType.ENVIO, 50, OrderStatus.LISTO, "Maria", 2,
        [("Jamon y Morrones", "entera", 2)],
    ),
]


class Command(BaseCommand):
    help = "Seed database with the demo menu, drivers and a few orders."

    def handle(self, *args, **options):
        self.stdout.write("Seeding development data...")

        with transaction.atomic():
            users_created = self._seed_users()
            categories = self._seed_categories()
            items = self._seed_menu()
            drivers = self._seed_drivers()
            orders_created = self._seed_orders(categories, items, drivers)

        self.stdout.write(
            self.style.SUCCESS(
                "Seed completed: "
                f"users={users_created}, "
                f"categories={len(categories)}, "
                f"menu_items={len(items)}, "
                f"drivers={len(drivers)}, "
                f"orders={orders_created}"
            )
        )

    def _seed_users(self) -> int:
        User = get_user_model()
        created = 0
        if not User.objects.filter(username="admin").exists():
            User.objects.create_superuser("admin", password="admin123")
            created += 1
        return created

    def _seed_categories(self) -> list[Category]:
        self.stdout.write("Creating categories...")
        categories = []
        for name, multi, dozen in CATEGORIES:
            category, _ = Category.objects.get_or_create(
                name=name,
                defaults={"has_multiple_sizes": multi, "sold_by_dozen": dozen},
            )
            categories.append(category)
        self.stdout.write(self.style.SUCCESS("Creating categories... Done!"))
        return categories

    def _seed_menu(self) -> dict[str, MenuItem]:
        self.stdout.write("Creating menu items...")
        items: dict[str, MenuItem] = {}
        for name, ingredients, category, full, half, unit, available in MENU:
            item = MenuItem.objects.alive().filter(name=name).first()
            if item is None:
                item = MenuItem.objects.create(
                    name=name,
                    ingredients=ingredients,
                    category=category,
                    price_full=Decimal(full),
                    price_half=Decimal(half) if half else None,
                    price_unit=Decimal(unit) if unit else None,
                    available=available,
                )
            items[name] = item
        self.stdout.write(self.style.SUCCESS("Creating menu items... Done!"))
        return items

    def _seed_drivers(self) -> dict[str, DeliveryPerson]:
        self.stdout.write("Creating drivers...")
        drivers: dict[str, DeliveryPerson] = {}
        for name in DRIVERS:
            driver = DeliveryPerson.objects.alive().filter(name__iexact=name).first()
            if driver is None:
                driver = DeliveryPerson(name=name)
                driver.set_password(DRIVER_PASSWORD)
                driver.save()
            drivers[name] = driver
        self.stdout.write(self.style.SUCCESS("Creating drivers... Done!"))
        return drivers

    def _seed_orders(
        self,
        categories: list[Category],
        items: dict[str, MenuItem],
        drivers: dict[str, DeliveryPerson],
    ) -> int:
        self.stdout.write("Creating orders...")
        if Order.objects.exists():
            self.stdout.write(self.style.WARNING("Skipping orders (already seeded)."))
            return 0

        by_name = {category.name: category for category in categories}
        now = timezone.now()
        for (
            customer, phone, address, delivery_type, delay, status, driver_name,
            minutes_ago, lines,
        ) in ORDERS:
            created_at = now - timedelta(minutes=minutes_ago)
            driver = drivers.get(driver_name) if driver_name else None
            order = Order.objects.create(
                customer_name=customer,
                customer_phone=phone,
                delivery_type=delivery_type,
                address=address,
                delivery_person_id=driver.id if driver else None,
                delay=delay,
                estimated_time=estimated_time(created_at, delay),
                status=status,
                created_at=created_at,
            )

            total = Decimal("0.00")
            for name, size, quantity in lines:
                menu_item = items[name]
                line = OrderItem.objects.create(
                    order=order,
                    menu_item_id=str(menu_item.id),
                    name=menu_item.name,
                    size=size,
                    quantity=quantity,
                    unit_price=resolve_price(
                        menu_item, size, by_name[menu_item.category], quantity
                    ),
                )
                total += line.subtotal
            Order.objects.filter(id=order.id).update(total_amount=total)

            OrderStatusHistory.objects.create(
                order=order, old_status=None, new_status=status, actor="seed"
            )

        self.stdout.write(self.style.SUCCESS("Creating orders... Done!"))
        return len(ORDERS)
