"""
Category catalog: listing, product counts, CRUD and image upload
"""
import logging
from typing import Any, Dict, List, Optional

from sqlalchemy import func
from werkzeug.datastructures import FileStorage

from app import db
from app.models import Category, product_categories
from app.services import messages
from app.services.database import get_offset, page_meta, transaction
from app.services.error_handler import BadRequestError, NotFoundError, ServerError
from app.services.image_storage import delete_image, ensure_image, prepare_image
from app.services.product_service import clamp, normalize_desc, parse_int
from app.services.slugs import generate_unique_slug

logger = logging.getLogger(__name__)

IMAGE_KIND = 'category'


def get_categories(page: int = 1, item_per_page: int = 99999) -> Dict[str, Any]:
    page = max(1, page)
    item_per_page = max(1, item_per_page)

    categories = (Category.query
                  .order_by(Category.priority.desc(), Category.id)
                  .offset(get_offset(page, item_per_page))
                  .limit(item_per_page)
                  .all())
    total_categories = Category.query.count()

    return {
        'meta': page_meta('category', page, item_per_page, total_categories),
        'categories': [category.to_dict() for category in categories],
    }


def get_categories_count() -> List[Dict[str, Any]]:
    """Number of products filed under each category slug"""
    counts = dict(
        db.session.query(product_categories.c.category_slug, func.count())
        .group_by(product_categories.c.category_slug)
        .all()
    )
    return [{'slug': slug, 'count': counts.get(slug, 0)}
            for (slug,) in db.session.query(Category.slug).order_by(Category.id).all()]


def create_category(name: str, desc: Optional[str], priority,
                    image: Optional[FileStorage] = None) -> Category:
    priority = parse_int(priority)
    if not name or priority is None:
        raise BadRequestError(messages.missing_parameters('name', 'priority'))

    ensure_image(image)

    with transaction():
        slug = generate_unique_slug(Category, name)
        pending_image = prepare_image(IMAGE_KIND, image)

        category = Category(
            slug=slug,
            name=name,
            desc=normalize_desc(desc),
            image_file_name=pending_image.file_name if pending_image else None,
            priority=clamp(priority),
        )
        db.session.add(category)
        db.session.flush()

    if pending_image:
        pending_image.save()

    logger.info(f'Category created: {slug}', extra={
        'event_type': 'category_created',
        'category_slug': slug
    })
    return category


def update_category(slug: str, name: str, desc: Optional[str], priority) -> Category:
    priority = parse_int(priority)
    if not slug or not name or priority is None:
        raise BadRequestError(messages.missing_parameters('slug', 'name', 'priority'))

    with transaction():
        category = Category.query.filter_by(slug=slug).with_for_update().first()
        if category is None:
            raise NotFoundError(f'{messages.CATEGORY_NOT_FOUND} ({slug})')

        new_slug = generate_unique_slug(Category, name, current_slug=slug)
        if new_slug != slug:
            # Re-point the product links at the new slug
            products = list(category.products)
            category.products = []
            db.session.flush()
            category.slug = new_slug
            db.session.flush()
            category.products = products

        category.name = name
        category.desc = normalize_desc(desc)
        category.priority = clamp(priority)
        db.session.flush()

    return category


def delete_category(slug: str) -> None:
    if not slug:
        raise BadRequestError(messages.missing_parameters('slug'))

    with transaction():
        category = Category.query.filter_by(slug=slug).first()
        if category is None:
            raise NotFoundError(f'{messages.CATEGORY_NOT_FOUND} ({slug})')
        image_file_name = category.image_file_name

        category.products = []
        db.session.flush()
        deleted = Category.query.filter_by(slug=slug).delete(synchronize_session=False)
        if not deleted:
            raise ServerError(messages.DELETE_CATEGORY_ERROR, context={'category_slug': slug})

    delete_image(IMAGE_KIND, image_file_name)

    logger.info(f'Category deleted: {slug}', extra={
        'event_type': 'category_deleted',
        'category_slug': slug
    })


def upload_category_image(slug: str, image: Optional[FileStorage]) -> str:
    if not slug or image is None:
        raise BadRequestError(messages.missing_parameters('slug', 'image'))
    ensure_image(image)

    with transaction():
        category = Category.query.filter_by(slug=slug).first()
        if category is None:
            raise NotFoundError(f'{messages.CATEGORY_NOT_FOUND} ({slug})')

        old_file_name = category.image_file_name
        pending_image = prepare_image(IMAGE_KIND, image)
        category.image_file_name = pending_image.file_name
        db.session.flush()

    pending_image.save()
    if old_file_name and old_file_name != pending_image.file_name:
        delete_image(IMAGE_KIND, old_file_name)

    return pending_image.file_name
