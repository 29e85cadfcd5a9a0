from __future__ import annotations

import random
from decimal import Decimal

from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand
from django.db import transaction

from modules.carts.models import Cart, CartLine
from modules.catalog.models import Book, Publisher
from modules.customers.models import Customer

PUBLISHERS = [
    ("Penguin Random House", "orders@penguinrandomhouse.example"),
    ("HarperCollins", "trade@harpercollins.example"),
    ("O'Reilly Media", "supply@oreilly.example"),
]

BOOKS = [
    ("9780141439518", "Pride and Prejudice", 0, "9.99", 25, 5),
    ("9780140449136", "Crime and Punishment", 0, "14.50", 12, 3),
    ("9780062316097", "Sapiens", 1, "22.00", 40, 10),
    ("9780061120084", "To Kill a Mockingbird", 1, "12.99", 8, 4),
    ("9781492056355", "Fluent Python", 2, "59.99", 6, 3),
    ("9781098125974", "Architecture Patterns with Python", 2, "49.99", 4, 2),
    ("9781491950357", "Designing Data-Intensive Applications", 2, "54.00", 3, 3),
    ("9780596007126", "Head First Design Patterns", 2, "44.95", 0, 0),
]

CUSTOMERS = [
    ("alice", "Alice", "Martin", "alice@example.com"),
    ("bob", "Bob", "Nakamura", "bob@example.com"),
    ("carol", "Carol", "Okafor", "carol@example.com"),
]


class Command(BaseCommand):
    help = "Seed database with realistic development data."

    @transaction.atomic
    def handle(self, *args, **options):
        random.seed(42)
        self.stdout.write("Seeding development data...")

        self._seed_staff()
        publishers = self._seed_publishers()
        books = self._seed_books(publishers)
        customers = self._seed_customers()
        lines = self._seed_carts(customers, books)

        self.stdout.write(
            self.style.SUCCESS(
                "Seed completed: "
                f"publishers={len(publishers)}, "
                f"books={len(books)}, "
                f"customers={len(customers)}, "
                f"cart_lines={lines}"
            )
        )

    def _seed_staff(self) -> None:
        User = get_user_model()
        if not User.objects.filter(username="admin").exists():
            User.objects.create_superuser("admin", password="admin123")

    def _seed_publishers(self) -> list[Publisher]:
        self.stdout.write("Creating publishers...")
        return [
            Publisher.objects.get_or_create(name=name, defaults={"email": email})[0]
            for name, email in PUBLISHERS
        ]

    def _seed_books(self, publishers: list[Publisher]) -> list[Book]:
        self.stdout.write("Creating books...")
        books = []
        for isbn, title, publisher_index, price, stock, threshold in BOOKS:
            book, _ = Book.objects.get_or_create(
                isbn=isbn,
                defaults={
                    "title": title,
                    "publisher": publishers[publisher_index],
                    "price": Decimal(price),
                    "stock_quantity": stock,
                    "threshold": threshold,
                },
            )
            books.append(book)
        return books

    def _seed_customers(self) -> list[Customer]:
        self.stdout.write("Creating customers...")
        User = get_user_model()
        customers = []
        for username, first_name, last_name, email in CUSTOMERS:
            user = User.objects.filter(username=username).first()
            if user is None:
                user = User.objects.create_user(
                    username, email=email, password=f"{username}123"
                )
            customer, _ = Customer.objects.get_or_create(
                user=user,
                defaults={
                    "first_name": first_name,
                    "last_name": last_name,
                    "email": email,
                },
            )
            customers.append(customer)
        return customers

    def _seed_carts(self, customers: list[Customer], books: list[Book]) -> int:
        self.stdout.write("Filling carts...")
        in_stock = [book for book in books if book.stock_quantity > 0]
        created = 0
        for customer in customers:
            cart, _ = Cart.objects.get_or_create(customer=customer)
            for book in random.sample(in_stock, k=2):
                _, was_created = CartLine.objects.get_or_create(
                    cart=cart,
                    book=book,
                    defaults={"quantity": random.randint(1, 2)},
                )
                created += int(was_created)
        return created
