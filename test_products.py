#!/usr/bin/env python3
"""
Product catalog endpoints
"""
import io
import json
from pathlib import Path

import pytest

from app import db
from app.models import Product
from app.services import messages
from app.services.product_service import MAX_INT, normalize_desc, parse_int


def product_form(**fields):
    data = {'name': 'Green Tea', 'desc': 'Loose leaf', 'price': '480', 'quantity': '20', 'priority': '1'}
    data.update(fields)
    return data


def image_file(name='tea photo.png', content=b'\x89PNG fake', mimetype='image/png'):
    return (io.BytesIO(content), name, mimetype)


def test_list_products_is_public(client, make_product):
    for index in range(3):
        make_product(f'item-{index}', price=100 + index)

    response = client.get('/product?page=1&itemPerPage=2')

    assert response.status_code == 200
    data = response.get_json()['data']
    assert [product['slug'] for product in data['products']] == ['item-0', 'item-1']
    assert data['meta']['totalItems'] == 3
    assert data['meta']['nextPage'] == '/product?page=2&itemPerPage=2'


def test_product_wire_shape(client, make_category, make_product):
    make_category('drinks', priority=1)
    make_category('sale', priority=5)
    make_product('green-tea', price=480, quantity=7, categories=['drinks', 'sale'])

    product = client.get('/product').get_json()['data']['products'][0]

    assert product == {
        'slug': 'green-tea',
        'name': 'Green-Tea',
        'category': ['sale', 'drinks'],
        'desc': None,
        'price': 480,
        'imageFileName': None,
        'quantity': 7,
        'priority': 1,
    }


def test_create_product_from_json(admin_client, make_category):
    make_category('drinks')

    response = admin_client.post('/product', json=product_form(categories='drinks'))

    assert response.status_code == 201
    assert response.get_json()['data'] == {'slug': 'green-tea'}
    product = Product.query.filter_by(slug='green-tea').one()
    assert product.price == 480
    assert product.quantity == 20
    assert product.category_slugs() == ['drinks']


def test_create_product_with_image(admin_client, app):
    data = product_form(image=image_file())

    response = admin_client.post('/product', data=data, content_type='multipart/form-data')

    assert response.status_code == 201
    product = Product.query.filter_by(slug='green-tea').one()
    assert product.image_file_name == 'teaphoto.png'
    assert (Path(app.config['UPLOAD_FOLDER']) / 'product' / 'teaphoto.png').read_bytes() == b'\x89PNG fake'


def test_create_product_rejects_non_images(admin_client):
    data = product_form(image=image_file(name='notes.txt', mimetype='text/plain'))

    response = admin_client.post('/product', data=data, content_type='multipart/form-data')

    assert response.status_code == 400
    assert response.get_json()['message'] == messages.INVALID_IMAGE_FILE_TYPE
    assert Product.query.count() == 0


def test_create_product_rejects_unknown_category(admin_client, make_category):
    make_category('drinks')

    response = admin_client.post('/product', json=product_form(categories='drinks,snacks'))

    assert response.status_code == 400
    assert response.get_json()['message'] == messages.PRODUCT_INVALID_CATEGORY
    assert Product.query.count() == 0


def test_duplicate_names_get_distinct_slugs(admin_client):
    first = admin_client.post('/product', json=product_form()).get_json()['data']['slug']
    second = admin_client.post('/product', json=product_form()).get_json()['data']['slug']

    assert first == 'green-tea'
    assert second.startswith('green-tea-')
    assert second != first


def test_create_product_requires_fields(admin_client):
    response = admin_client.post('/product', json={'name': 'Green Tea'})

    assert response.status_code == 400
    assert response.get_json()['message'] == messages.missing_parameters(
        'name', 'price', 'quantity', 'priority')


def test_numbers_are_clamped(admin_client):
    response = admin_client.post('/product', json=product_form(price='99999999999', quantity='-5'))

    assert response.status_code == 201
    product = Product.query.one()
    assert product.price == MAX_INT
    assert product.quantity == 5


def test_update_product_renames_and_keeps_links(admin_client, make_category, make_product):
    make_category('drinks')
    make_category('tea')
    make_product('green-tea', quantity=3, categories=['drinks'])

    response = admin_client.put('/product', json={
        'slug': 'green-tea', 'name': 'Matcha Latte', 'categories': 'drinks,tea',
        'desc': 'Creamy', 'price': 550, 'priority': 2,
    })

    assert response.status_code == 200
    assert response.get_json()['data'] == {'slug': 'matcha-latte'}
    assert Product.query.filter_by(slug='green-tea').first() is None
    product = Product.query.filter_by(slug='matcha-latte').one()
    assert sorted(product.category_slugs()) == ['drinks', 'tea']
    assert product.price == 550
    assert product.quantity == 3


def test_update_product_quantity(admin_client, make_product):
    make_product('green-tea', quantity=3)

    admin_client.put('/product', json={
        'slug': 'green-tea', 'name': 'Green-Tea', 'price': 100, 'priority': 1, 'quantity': 12,
    })

    product = Product.query.filter_by(slug='green-tea').one()
    assert product.quantity == 12


def test_update_missing_product(admin_client):
    response = admin_client.put('/product', json={
        'slug': 'ghost', 'name': 'Ghost', 'price': 1, 'priority': 1,
    })

    assert response.status_code == 400
    assert response.get_json()['message'] == f'{messages.PRODUCT_NOT_FOUND} (ghost)'


def test_delete_product_removes_image(admin_client, app):
    admin_client.post('/product', data=product_form(image=image_file()),
                      content_type='multipart/form-data')
    image_path = Path(app.config['UPLOAD_FOLDER']) / 'product' / 'teaphoto.png'
    assert image_path.exists()

    response = admin_client.delete('/product', json={'slug': 'green-tea'})

    assert response.status_code == 200
    assert Product.query.count() == 0
    assert not image_path.exists()


def test_upload_image_replaces_previous(admin_client, app, make_product):
    make_product('green-tea')
    upload_dir = Path(app.config['UPLOAD_FOLDER']) / 'product'

    first = admin_client.post('/product/image', data={'slug': 'green-tea', 'image': image_file('a.png')},
                              content_type='multipart/form-data')
    second = admin_client.post('/product/image', data={'slug': 'green-tea', 'image': image_file('b.png')},
                               content_type='multipart/form-data')

    assert first.status_code == second.status_code == 201
    assert second.get_json()['data'] == {'imageFileName': 'b.png'}
    assert not (upload_dir / 'a.png').exists()
    assert (upload_dir / 'b.png').exists()
    assert Product.query.filter_by(slug='green-tea').one().image_file_name == 'b.png'


def test_clashing_image_names_get_a_suffix(admin_client, app, make_product):
    make_product('green-tea')
    make_product('black-tea')

    admin_client.post('/product/image', data={'slug': 'green-tea', 'image': image_file('tea.png')},
                      content_type='multipart/form-data')
    response = admin_client.post('/product/image', data={'slug': 'black-tea', 'image': image_file('tea.png')},
                                 content_type='multipart/form-data')

    file_name = response.get_json()['data']['imageFileName']
    assert file_name.startswith('tea-') and file_name.endswith('.png')


def test_members_cannot_change_products(member_client):
    response = member_client.post('/product', json=product_form())

    assert response.status_code == 403
    assert Product.query.count() == 0


@pytest.mark.parametrize('value, expected', [
    ('1,200', 1200),
    ('abc', None),
    (None, None),
    (7, 7),
    (7.9, 7),
])
def test_parse_int(value, expected):
    assert parse_int(value) == expected


def test_empty_editor_document_counts_as_no_description():
    empty = json.dumps([{'type': 'paragraph', 'children': [{'text': ''}]}])
    filled = json.dumps([{'type': 'paragraph', 'children': [{'text': 'Hello'}]}])

    assert normalize_desc(empty) == ''
    assert normalize_desc(filled) == filled
    assert normalize_desc('plain text') == 'plain text'
