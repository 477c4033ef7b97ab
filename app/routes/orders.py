from flask import Blueprint, current_app

from app.routes.helpers import pagination_args, request_payload
from app.services import messages, order_service
from app.services.error_handler import api_response
from app.services.security_service import admin_required

bp = Blueprint('orders', __name__, url_prefix='/order')

@bp.route('', methods=['GET'])
@admin_required
def get_orders():
    page, item_per_page = pagination_args(12)
    result = order_service.get_orders(page, item_per_page)
    return api_response(messages.GET_DATA_SUCCESS, result)

@bp.route('', methods=['POST'])
def create_order():
    data = request_payload()

    current_app.logger.info('Order placement requested', extra={
        'event_type': 'checkout_start',
        'delivery_method': data.get('deliveryMethod')
    })

    order_service.create_order(
        data.get('deliveryMethod'),
        data.get('customerName'),
        data.get('customerPhoneNumber'),
        data.get('items'),
        delivery_address=data.get('deliveryAddress'),
        delivery_time=data.get('deliveryTime'),
        pickup_at=data.get('pickupAt'),
        delivery_note=data.get('deliveryNote'),
    )
    return api_response(messages.CREATE_ORDER_SUCCESS)

@bp.route('', methods=['PATCH'])
@admin_required
def update_order():
    data = request_payload()
    order_service.update_order(data.get('orderId'), data.get('status'))
    return api_response(messages.UPDATE_ORDER_SUCCESS)

@bp.route('', methods=['DELETE'])
@admin_required
def delete_order():
    data = request_payload()
    order_service.delete_order(data.get('orderId'))
    return api_response(messages.DELETE_ORDER_SUCCESS)

@bp.route('/restore-product-quantity', methods=['POST'])
@admin_required
def restore_product_quantity():
    data = request_payload()
    order_service.restore_product_quantity(data.get('orderId'))
    return api_response(messages.RESTORE_ORDER_PRODUCT_QUANTITY_SUCCESS)
