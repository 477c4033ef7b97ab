"""
Transaction and pagination helpers shared by the services
"""
import logging
import math
from contextlib import contextmanager

from app import db

logger = logging.getLogger(__name__)


@contextmanager
def transaction():
    """
    Run a block of work as one unit on the request session.

    Commits when the block exits normally, rolls back and re-raises on any
    exception. The session itself is released by Flask-SQLAlchemy at the end
    of the app context.
    """
    try:
        yield db.session
        db.session.commit()
    except Exception:
        db.session.rollback()
        logger.info('Transaction rolled back', extra={'event_type': 'transaction_rollback'})
        raise


def get_offset(page, item_per_page):
    return (page - 1) * item_per_page


def page_meta(resource, page, item_per_page, total_items):
    """Offset pagination metadata with links to the neighbouring pages"""
    prev_page = max(1, page - 1)
    next_page = max(1, min(math.ceil(total_items / item_per_page), page + 1))

    return {
        'page': page,
        'itemPerPage': item_per_page,
        'totalItems': total_items,
        'isFirstPage': page == 1,
        'isLastPage': page == next_page,
        'prevPage': f'/{resource}?page={prev_page}&itemPerPage={item_per_page}',
        'nextPage': f'/{resource}?page={next_page}&itemPerPage={item_per_page}',
    }
