"""
Slug generation for products and categories
"""
import random
import time

from slugify import slugify

from app.services import messages
from app.services.error_handler import ServerError

MAX_SLUG_ATTEMPTS = 3


def to_slug(value: str) -> str:
    """Lowercase, ASCII-only slug of a display name"""
    return slugify(value, lowercase=True)


def random_token() -> int:
    return random.randint(0, int(time.time() * 1000))


def generate_unique_slug(model, name: str, current_slug: str = None) -> str:
    """
    Find a free slug for ``name`` in ``model``'s table.

    The first attempt is the plain slug, later attempts append a random
    numeric token. When renaming an existing row, its own ``current_slug``
    counts as free. Meant to be called inside a transaction.
    """
    base = to_slug(name)
    slug = base
    for attempt in range(MAX_SLUG_ATTEMPTS):
        if attempt:
            slug = f'{base}-{random_token()}'
        taken = model.query.filter(model.slug == slug).first() is not None
        if not taken or slug == current_slug:
            return slug

    raise ServerError(messages.SLUG_GENERATE_ERROR)
