"""
Shared pytest fixtures: an app on in-memory SQLite and helpers for logging in
"""
import pytest

from app import create_app, db
from app.models import Category, Product, User
from app.services.security_service import rate_limiter

ADMIN_USERNAME = 'adminuser'
ADMIN_PASSWORD = 'AdminPass123'
MEMBER_USERNAME = 'memberuser'
MEMBER_PASSWORD = 'MemberPass123'


@pytest.fixture
def app(tmp_path):
    app = create_app({
        'TESTING': True,
        'SECRET_KEY': 'test-secret-key',
        'SQLALCHEMY_DATABASE_URI': 'sqlite://',
        'UPLOAD_FOLDER': str(tmp_path / 'upload'),
        'RATELIMIT_ENABLED': False,
        'MAIL_SERVER': '',
        'CORS_ORIGINS': ['http://localhost:3000'],
    })

    with app.app_context():
        db.create_all()
        rate_limiter.reset()
        yield app
        db.session.remove()
        db.drop_all()

    rate_limiter.reset()


@pytest.fixture
def client(app):
    return app.test_client()


def _add_user(username, password, role):
    user = User(username=username, email=f'{username}@example.com', role=role)
    user.set_password(password)
    db.session.add(user)
    db.session.commit()
    return user


def login(client, username, password):
    return client.post('/authorize', json={'username': username, 'password': password})


@pytest.fixture
def admin_client(app, client):
    _add_user(ADMIN_USERNAME, ADMIN_PASSWORD, 'admin')
    response = login(client, ADMIN_USERNAME, ADMIN_PASSWORD)
    assert response.status_code == 200
    return client


@pytest.fixture
def member_client(app, client):
    _add_user(MEMBER_USERNAME, MEMBER_PASSWORD, 'member')
    response = login(client, MEMBER_USERNAME, MEMBER_PASSWORD)
    assert response.status_code == 200
    return client


@pytest.fixture
def make_product(app):
    """Insert a product straight into the database"""
    def _make_product(slug, price=100, quantity=10, name=None, categories=None):
        product = Product(slug=slug, name=name or slug.title(), price=price,
                          quantity=quantity, priority=1)
        if categories:
            product.categories = Category.query.filter(Category.slug.in_(categories)).all()
        db.session.add(product)
        db.session.commit()
        return product
    return _make_product


@pytest.fixture
def make_category(app):
    def _make_category(slug, priority=1, name=None):
        category = Category(slug=slug, name=name or slug.title(), priority=priority)
        db.session.add(category)
        db.session.commit()
        return category
    return _make_category
