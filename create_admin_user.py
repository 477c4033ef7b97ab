#!/usr/bin/env python3
"""
Create an admin account
Use after initializing the database when no admin exists yet
"""

from app import create_app, db
from app.models.user import User
from app.services import account_service
from app.services.error_handler import APIError
import getpass
import sys

def create_admin_user():
    app = create_app()

    with app.app_context():
        existing_admin = User.query.filter_by(role='admin').first()
        if existing_admin:
            print(f"Admin user already exists: {existing_admin.username}")
            return

        print("Creating a new admin user")
        username = input("Username (default: shopadmin): ").strip() or "shopadmin"
        email = input("Email (default: admin@example.com): ").strip() or "admin@example.com"

        while True:
            password = getpass.getpass("Password: ")
            try:
                account_service.validate_password(password)
            except APIError as e:
                print(e.message)
                continue

            password_confirm = getpass.getpass("Password (again): ")
            if password != password_confirm:
                print("Passwords do not match")
                continue
            break

        try:
            user = account_service.register(username, email, password)
        except APIError as e:
            print(f"Failed to create admin user: {e.message}")
            sys.exit(1)

        user.role = 'admin'
        db.session.commit()
        print(f"Admin user '{user.username}' created")
        print(f"   Email: {user.email}")

def list_users():
    """Print the current users"""
    app = create_app()

    with app.app_context():
        users = User.query.all()
        if not users:
            print("No users")
            return

        print("Current users:")
        for user in users:
            print(f"   {user.role:<6} | {user.username} ({user.email}) | ID: {user.id}")

if __name__ == "__main__":
    if len(sys.argv) > 1 and sys.argv[1] == "list":
        list_users()
    else:
        create_admin_user()
