from app import db
from datetime import datetime
from enum import Enum


class DeliveryMethod(Enum):
    SHIPPING = 'shipping'
    PICKUP = 'pickup'


class OrderStatus(Enum):
    """Order statuses. Any status may follow any other."""
    PROCESSING = 'processing'
    SHIPPING = 'shipping'
    COMPLETED = 'completed'
    REFUNDING = 'refunding'
    ABORTED = 'aborted'
    REFUNDED = 'refunded'


# Statuses under which the reserved stock may be given back
RESTORABLE_STATUSES = {OrderStatus.ABORTED.value, OrderStatus.REFUNDED.value}


def _isoformat(value):
    return value.isoformat() if value else None


class Order(db.Model):
    __tablename__ = 'orders'

    id = db.Column(db.Integer, primary_key=True)
    order_id = db.Column(db.Integer, unique=True, nullable=False)
    delivery_method = db.Column(db.String(255), nullable=False)
    delivery_address = db.Column(db.Text)
    delivery_time = db.Column(db.DateTime)
    pickup_at = db.Column(db.Text)
    delivery_note = db.Column(db.Text)
    customer_name = db.Column(db.String(255), nullable=False)
    customer_phone_number = db.Column(db.String(255), nullable=False)
    # Cart snapshot at purchase time, never rewritten
    items = db.Column(db.JSON, nullable=False)
    status = db.Column(db.String(255), nullable=False, default=OrderStatus.PROCESSING.value)
    quantity_restored = db.Column(db.Boolean, nullable=False, default=False)
    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)

    def to_dict(self):
        return {
            'orderId': self.order_id,
            'deliveryMethod': self.delivery_method,
            'deliveryAddress': self.delivery_address,
            'deliveryTime': _isoformat(self.delivery_time),
            'pickupAt': self.pickup_at,
            'deliveryNote': self.delivery_note,
            'customerName': self.customer_name,
            'customerPhoneNumber': self.customer_phone_number,
            'items': self.items,
            'status': self.status,
            'createdAt': _isoformat(self.created_at),
        }

    def __repr__(self):
        return f'<Order {self.order_id}>'


class OrderCounter(db.Model):
    """Single-row sequence handing out human-facing order numbers"""
    __tablename__ = 'order_counters'

    name = db.Column(db.String(50), primary_key=True)
    value = db.Column(db.Integer, nullable=False, default=0)

    def __repr__(self):
        return f'<OrderCounter {self.name}={self.value}>'
