#!/usr/bin/env python3
"""
Database initialization script
Creates sample categories and products for the shop
"""

import sys
import os

# Add parent directory to path to import app
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from app import create_app, db
from app.models import Category, Product
from app.services.slugs import to_slug

SAMPLE_CATEGORIES = [
    {'name': 'Drinks', 'desc': 'Tea, coffee and juice', 'priority': 10},
    {'name': 'Snacks', 'desc': 'Crackers and sweets', 'priority': 5},
    {'name': 'Sale', 'desc': 'Discounted items', 'priority': 20},
]

SAMPLE_PRODUCTS = [
    {'name': 'Green Tea', 'price': 480, 'quantity': 50, 'categories': ['drinks']},
    {'name': 'Cold Brew Coffee', 'price': 620, 'quantity': 30, 'categories': ['drinks']},
    {'name': 'Orange Juice', 'price': 350, 'quantity': 40, 'categories': ['drinks', 'sale']},
    {'name': 'Rice Crackers', 'price': 280, 'quantity': 60, 'categories': ['snacks']},
    {'name': 'Matcha Cookies', 'price': 540, 'quantity': 25, 'categories': ['snacks', 'sale']},
    {'name': 'Dried Mango', 'price': 450, 'quantity': 35, 'categories': ['snacks']},
]


def init_db():
    app = create_app()

    with app.app_context():
        # Create all tables
        print("Creating database tables...")
        db.create_all()

        # Check if products already exist
        if Product.query.first():
            print("Database already initialized.")
            return

        print("Creating sample categories...")
        categories = {}
        for category_data in SAMPLE_CATEGORIES:
            category = Category(slug=to_slug(category_data['name']), **category_data)
            categories[category.slug] = category
            db.session.add(category)

        print("Creating sample products...")
        for product_data in SAMPLE_PRODUCTS:
            product = Product(
                slug=to_slug(product_data['name']),
                name=product_data['name'],
                price=product_data['price'],
                quantity=product_data['quantity'],
                priority=1,
            )
            product.categories = [categories[slug] for slug in product_data['categories']]
            db.session.add(product)

        db.session.commit()
        print(f"Successfully created {len(SAMPLE_CATEGORIES)} categories "
              f"and {len(SAMPLE_PRODUCTS)} products")


if __name__ == '__main__':
    init_db()
