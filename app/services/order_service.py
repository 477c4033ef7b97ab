"""
Order placement and stock reconciliation

Placing an order checks the submitted cart against the live product rows,
takes the stock out and stores the order in a single transaction. Aborted or
refunded orders can give their stock back.
"""
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from flask import current_app
from sqlalchemy import func
from sqlalchemy.exc import IntegrityError

from app import db
from app.models import Order, OrderCounter, Product
from app.models.order import DeliveryMethod, OrderStatus, RESTORABLE_STATUSES
from app.services import messages
from app.services.database import get_offset, page_meta, transaction
from app.services.error_handler import (
    BadRequestError, ConflictError, NotFoundError, PreconditionError, ServerError, require_text
)

logger = logging.getLogger(__name__)

ORDER_COUNTER = 'orders'
DELIVERY_METHODS = {method.value for method in DeliveryMethod}
ORDER_STATUSES = {status.value for status in OrderStatus}


@dataclass
class LineItem:
    """One cart entry as submitted by the client"""
    slug: str
    total_items: int
    price: Any
    snapshot: Dict[str, Any]


def parse_line_items(items) -> List[LineItem]:
    if not isinstance(items, list) or not items:
        raise BadRequestError(messages.missing_parameters('items'))

    line_items = []
    for item in items:
        product = item.get('product') if isinstance(item, dict) else None
        slug = product.get('slug') if isinstance(product, dict) else None
        total_items = item.get('totalItems') if isinstance(item, dict) else None
        if (not slug or not isinstance(slug, str)
                or isinstance(total_items, bool) or not isinstance(total_items, int)
                or total_items <= 0):
            raise BadRequestError(messages.missing_parameters('items'))
        line_items.append(LineItem(slug, total_items, product.get('price'), item))
    return line_items


def parse_order_id(order_id) -> int:
    if isinstance(order_id, bool) or not order_id:
        raise BadRequestError(messages.missing_parameters('orderId'))
    try:
        return int(order_id)
    except (TypeError, ValueError):
        raise BadRequestError(messages.missing_parameters('orderId'))


def parse_delivery_time(delivery_time) -> Optional[datetime]:
    """Milliseconds since the epoch to a naive UTC datetime"""
    if delivery_time in (None, ''):
        return None
    try:
        millis = int(delivery_time)
        if not millis:
            return None
        return datetime.fromtimestamp(millis / 1000, tz=timezone.utc).replace(tzinfo=None)
    except (TypeError, ValueError, OverflowError, OSError):
        raise BadRequestError(messages.missing_parameters('deliveryTime'))


def same_price(snapshot_price, current_price) -> bool:
    if isinstance(snapshot_price, bool) or not isinstance(snapshot_price, (int, float)):
        return False
    return float(snapshot_price) == float(current_price)


def next_order_id() -> int:
    """
    Hand out the next order number.

    The counter row is bumped with a single UPDATE, so concurrent placements
    queue on its row lock until the holder commits or rolls back. The first
    order seeds the counter from the highest existing order number; when two
    first orders race, the loser's insert fails and it bumps the winner's row.
    """
    counter = OrderCounter.query.filter_by(name=ORDER_COUNTER)
    bumped = counter.update({OrderCounter.value: OrderCounter.value + 1},
                            synchronize_session=False)
    if not bumped:
        current_max = db.session.query(func.coalesce(func.max(Order.order_id), 0)).scalar()
        try:
            with db.session.begin_nested():
                db.session.add(OrderCounter(name=ORDER_COUNTER, value=current_max + 1))
        except IntegrityError:
            logger.info('Order counter seeded concurrently, bumping it instead', extra={
                'event_type': 'order_counter_race'
            })
            bumped = counter.update({OrderCounter.value: OrderCounter.value + 1},
                                    synchronize_session=False)
            if not bumped:
                raise ServerError(messages.CREATE_ORDER_ERROR, context={'counter': ORDER_COUNTER})

    return db.session.query(OrderCounter.value).filter_by(name=ORDER_COUNTER).scalar()


def get_orders(page: int = 1, item_per_page: int = 12) -> Dict[str, Any]:
    page = max(1, page)
    item_per_page = max(1, item_per_page)

    orders = (Order.query
              .order_by(Order.order_id)
              .offset(get_offset(page, item_per_page))
              .limit(item_per_page)
              .all())
    total_orders = Order.query.count()

    logger.info(f'Orders page {page} loaded', extra={
        'event_type': 'data_loaded',
        'order_count': len(orders),
        'total_orders': total_orders
    })

    return {
        'meta': page_meta('order', page, item_per_page, total_orders),
        'orders': [order.to_dict() for order in orders],
    }


def create_order(delivery_method: str, customer_name: str, customer_phone_number: str,
                 items: list, delivery_address: Optional[str] = None,
                 delivery_time=None, pickup_at: Optional[str] = None,
                 delivery_note: Optional[str] = None) -> Order:
    """
    Place an order and take its items out of stock.

    Raises:
        BadRequestError: missing or malformed input, checked before any database work
        ConflictError: a product is gone, short on stock, or its price moved
        ServerError: a stock write that should have gone through did not
    """
    require_text(deliveryMethod=delivery_method, customerName=customer_name,
                 customerPhoneNumber=customer_phone_number, deliveryAddress=delivery_address,
                 pickupAt=pickup_at, deliveryNote=delivery_note)

    if not delivery_method or not customer_name or not customer_phone_number or not items:
        raise BadRequestError(messages.missing_parameters(
            'deliveryMethod', 'customerName', 'customerPhoneNumber', 'items'))

    if delivery_method not in DELIVERY_METHODS:
        raise BadRequestError(messages.INVALID_SHIPPING_METHOD)

    if delivery_method == DeliveryMethod.SHIPPING.value and not delivery_address:
        raise BadRequestError(messages.missing_parameters('deliveryAddress'))

    if delivery_method == DeliveryMethod.PICKUP.value and not pickup_at:
        raise BadRequestError(messages.missing_parameters('pickupAt'))

    line_items = parse_line_items(items)
    delivery_time = parse_delivery_time(delivery_time)

    logger.info(f'Creating order for {customer_name}', extra={
        'event_type': 'order_create',
        'delivery_method': delivery_method,
        'item_count': len(line_items)
    })

    with transaction():
        slugs = {item.slug for item in line_items}
        current_prices = dict(
            db.session.query(Product.slug, Product.price).filter(Product.slug.in_(slugs)).all()
        )

        for item in line_items:
            current_quantity = (db.session.query(Product.quantity)
                                .filter(Product.slug == item.slug)
                                .with_for_update()
                                .scalar())
            if current_quantity is None or current_quantity - item.total_items < 0:
                logger.warning(f'Stock check failed for {item.slug}', extra={
                    'event_type': 'order_conflict',
                    'product_slug': item.slug,
                    'requested': item.total_items,
                    'available': current_quantity
                })
                raise ConflictError(messages.ORDER_NEED_UPDATE)

            decremented = (Product.query
                           .filter(Product.slug == item.slug,
                                   Product.quantity >= item.total_items)
                           .update({Product.quantity: Product.quantity - item.total_items},
                                   synchronize_session=False))
            if not decremented:
                raise ServerError(messages.CREATE_ORDER_ERROR,
                                  context={'product_slug': item.slug})

        for item in line_items:
            if item.slug not in current_prices or not same_price(item.price, current_prices[item.slug]):
                logger.warning(f'Cart snapshot is stale for {item.slug}', extra={
                    'event_type': 'order_conflict',
                    'product_slug': item.slug,
                    'submitted_price': item.price,
                    'current_price': current_prices.get(item.slug)
                })
                raise ConflictError(messages.ORDER_INFO_CHANGED)

        order = Order(
            order_id=next_order_id(),
            delivery_method=delivery_method,
            delivery_address=delivery_address or None,
            delivery_time=delivery_time,
            delivery_note=delivery_note or None,
            pickup_at=pickup_at or None,
            customer_name=customer_name,
            customer_phone_number=customer_phone_number,
            items=[item.snapshot for item in line_items],
            status=OrderStatus.PROCESSING.value,
        )
        db.session.add(order)
        db.session.flush()

    logger.info(f'Order {order.order_id} placed successfully', extra={
        'event_type': 'order_success',
        'order_id': order.order_id
    })
    return order


def _find_order(order_id: int, lock: bool = False) -> Order:
    query = Order.query.filter_by(order_id=order_id)
    if lock:
        query = query.with_for_update()
    order = query.first()
    if order is None:
        raise NotFoundError(f'{messages.ORDER_NOT_FOUND} ({order_id})')
    return order


def update_order(order_id, status: Optional[str] = None) -> None:
    order_id = parse_order_id(order_id)

    if status and status not in ORDER_STATUSES:
        raise BadRequestError(messages.INVALID_ORDER_STATUS)

    with transaction():
        order = _find_order(order_id, lock=True)
        if status:
            previous = order.status
            order.status = status
            logger.info(f'Order {order_id} status {previous} -> {status}', extra={
                'event_type': 'order_status_changed',
                'order_id': order_id
            })


def delete_order(order_id) -> None:
    order_id = parse_order_id(order_id)

    with transaction():
        _find_order(order_id)
        deleted = Order.query.filter_by(order_id=order_id).delete(synchronize_session=False)
        if not deleted:
            raise ServerError(messages.DELETE_ORDER_ERROR, context={'order_id': order_id})

    logger.info(f'Order {order_id} deleted', extra={
        'event_type': 'order_deleted',
        'order_id': order_id
    })


def restore_product_quantity(order_id) -> None:
    """
    Give the stock of an aborted or refunded order back to its products.

    Products deleted since the order was placed are skipped. Every call
    credits the stock again; the order only remembers that it was restored.
    With ``RESTORE_QUANTITY_ONCE`` set, a restored order is refused instead.
    """
    order_id = parse_order_id(order_id)

    with transaction():
        order = _find_order(order_id, lock=True)

        if order.status not in RESTORABLE_STATUSES:
            raise PreconditionError(messages.UNEXPECTED_ORDER_STATUS_WHILE_RESTORE_QUANTITY)

        if order.quantity_restored and current_app.config.get('RESTORE_QUANTITY_ONCE'):
            raise ConflictError(messages.ORDER_QUANTITY_ALREADY_RESTORED)

        for item in order.items:
            slug = item['product']['slug']
            total_items = item['totalItems']

            current_quantity = (db.session.query(Product.quantity)
                                .filter(Product.slug == slug)
                                .with_for_update()
                                .scalar())
            if current_quantity is None:
                continue

            restored = (Product.query
                        .filter(Product.slug == slug)
                        .update({Product.quantity: Product.quantity + total_items},
                                synchronize_session=False))
            if not restored:
                raise ServerError(messages.RESTORE_ORDER_PRODUCT_QUANTITY_ERROR,
                                  context={'product_slug': slug})

        order.quantity_restored = True

    logger.info(f'Stock restored for order {order_id}', extra={
        'event_type': 'stock_restored',
        'order_id': order_id
    })
