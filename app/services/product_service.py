"""
Product catalog: listing, CRUD and image upload
"""
import json
import logging
from typing import Any, Dict, List, Optional

from werkzeug.datastructures import FileStorage

from app import db
from app.models import Category, Product
from app.services import messages
from app.services.database import get_offset, page_meta, transaction
from app.services.error_handler import BadRequestError, NotFoundError, ServerError
from app.services.image_storage import delete_image, ensure_image, prepare_image
from app.services.slugs import generate_unique_slug

logger = logging.getLogger(__name__)

MAX_INT = 2147483647
IMAGE_KIND = 'product'


def clamp(value: int) -> int:
    return max(0, min(value, MAX_INT))


def parse_int(value) -> Optional[int]:
    """Digits of ``value`` as an int, None when there are none"""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value)
    digits = ''.join(ch for ch in str(value) if ch.isdigit())
    return int(digits) if digits else None


def normalize_desc(desc: Optional[str]) -> Optional[str]:
    """An editor document holding one empty paragraph counts as no description"""
    if not desc:
        return desc
    try:
        parsed = json.loads(desc)
    except (TypeError, ValueError):
        return desc
    if isinstance(parsed, list) and len(parsed) == 1 and isinstance(parsed[0], dict):
        children = parsed[0].get('children') or []
        if children and isinstance(children[0], dict) and children[0].get('text') == '':
            return ''
    return desc


def split_categories(categories) -> List[str]:
    if not categories:
        return []
    if isinstance(categories, list):
        return [str(slug) for slug in categories if slug]
    return [slug for slug in str(categories).split(',') if slug]


def resolve_categories(category_slugs: List[str]) -> List[Category]:
    if not category_slugs:
        return []
    found = Category.query.filter(Category.slug.in_(category_slugs)).all()
    if len({category.slug for category in found}) != len(set(category_slugs)):
        raise BadRequestError(messages.PRODUCT_INVALID_CATEGORY)
    return found


def get_products(page: int = 1, item_per_page: int = 12) -> Dict[str, Any]:
    page = max(1, page)
    item_per_page = max(1, item_per_page)

    products = (Product.query
                .order_by(Product.id)
                .offset(get_offset(page, item_per_page))
                .limit(item_per_page)
                .all())
    total_products = Product.query.count()

    logger.info(f'Displaying products page {page}', extra={
        'event_type': 'data_loaded',
        'product_count': len(products),
        'total_products': total_products
    })

    return {
        'meta': page_meta('product', page, item_per_page, total_products),
        'products': [product.to_dict() for product in products],
    }


def create_product(name: str, categories, desc: Optional[str], price, quantity, priority,
                   image: Optional[FileStorage] = None) -> Product:
    price, quantity, priority = parse_int(price), parse_int(quantity), parse_int(priority)
    if not name or price is None or quantity is None or priority is None:
        raise BadRequestError(messages.missing_parameters('name', 'price', 'quantity', 'priority'))

    ensure_image(image)
    desc = normalize_desc(desc)

    with transaction():
        slug = generate_unique_slug(Product, name)
        pending_image = prepare_image(IMAGE_KIND, image)

        product = Product(
            slug=slug,
            name=name,
            desc=desc,
            price=clamp(price),
            image_file_name=pending_image.file_name if pending_image else None,
            quantity=clamp(quantity),
            priority=clamp(priority),
        )
        product.categories = resolve_categories(split_categories(categories))
        db.session.add(product)
        db.session.flush()

    if pending_image:
        pending_image.save()

    logger.info(f'Product created: {slug}', extra={
        'event_type': 'product_created',
        'product_slug': slug
    })
    return product


def update_product(slug: str, name: str, categories, desc: Optional[str], price,
                   priority, quantity=None) -> Product:
    price, priority, quantity = parse_int(price), parse_int(priority), parse_int(quantity)
    if not slug or not name or price is None or priority is None:
        raise BadRequestError(messages.missing_parameters('slug', 'name', 'price', 'priority'))

    desc = normalize_desc(desc)

    with transaction():
        product = Product.query.filter_by(slug=slug).with_for_update().first()
        if product is None:
            raise NotFoundError(f'{messages.PRODUCT_NOT_FOUND} ({slug})')

        new_categories = resolve_categories(split_categories(categories))
        new_slug = generate_unique_slug(Product, name, current_slug=slug)

        # Drop the old associations before the slug they point at changes
        product.categories = []
        db.session.flush()

        product.slug = new_slug
        product.name = name
        product.desc = desc
        product.price = clamp(price)
        product.priority = clamp(priority)
        if quantity is not None:
            product.quantity = clamp(quantity)
        db.session.flush()

        product.categories = new_categories
        db.session.flush()

    logger.info(f'Product updated: {slug} -> {new_slug}', extra={
        'event_type': 'product_updated',
        'product_slug': new_slug
    })
    return product


def delete_product(slug: str) -> None:
    if not slug:
        raise BadRequestError(messages.missing_parameters('slug'))

    with transaction():
        product = Product.query.filter_by(slug=slug).first()
        if product is None:
            raise NotFoundError(f'{messages.PRODUCT_NOT_FOUND} ({slug})')
        image_file_name = product.image_file_name

        product.categories = []
        db.session.flush()
        deleted = Product.query.filter_by(slug=slug).delete(synchronize_session=False)
        if not deleted:
            raise ServerError(messages.DELETE_PRODUCT_ERROR, context={'product_slug': slug})

    delete_image(IMAGE_KIND, image_file_name)

    logger.info(f'Product deleted: {slug}', extra={
        'event_type': 'product_deleted',
        'product_slug': slug
    })


def upload_product_image(slug: str, image: Optional[FileStorage]) -> str:
    if not slug or image is None:
        raise BadRequestError(messages.missing_parameters('slug', 'image'))
    ensure_image(image)

    with transaction():
        product = Product.query.filter_by(slug=slug).first()
        if product is None:
            raise NotFoundError(f'{messages.PRODUCT_NOT_FOUND} ({slug})')

        old_file_name = product.image_file_name
        pending_image = prepare_image(IMAGE_KIND, image)
        product.image_file_name = pending_image.file_name
        db.session.flush()

    pending_image.save()
    if old_file_name and old_file_name != pending_image.file_name:
        delete_image(IMAGE_KIND, old_file_name)

    return pending_image.file_name
