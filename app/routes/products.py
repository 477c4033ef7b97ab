from flask import Blueprint, request

from app.routes.helpers import pagination_args, request_payload
from app.services import messages, product_service
from app.services.error_handler import api_response
from app.services.security_service import admin_required

bp = Blueprint('products', __name__, url_prefix='/product')

@bp.route('', methods=['GET'])
def list_products():
    page, item_per_page = pagination_args(12)
    result = product_service.get_products(page, item_per_page)
    return api_response(messages.GET_DATA_SUCCESS, result)

@bp.route('', methods=['POST'])
@admin_required
def create_product():
    data = request_payload()
    product = product_service.create_product(
        data.get('name'),
        data.get('categories'),
        data.get('desc'),
        data.get('price'),
        data.get('quantity'),
        data.get('priority'),
        image=request.files.get('image'),
    )
    return api_response(messages.CREATE_PRODUCT_SUCCESS, {'slug': product.slug}, status_code=201)

@bp.route('', methods=['PUT'])
@admin_required
def update_product():
    data = request_payload()
    product = product_service.update_product(
        data.get('slug'),
        data.get('name'),
        data.get('categories'),
        data.get('desc'),
        data.get('price'),
        data.get('priority'),
        quantity=data.get('quantity'),
    )
    return api_response(messages.UPDATE_PRODUCT_SUCCESS, {'slug': product.slug})

@bp.route('', methods=['DELETE'])
@admin_required
def delete_product():
    data = request_payload()
    product_service.delete_product(data.get('slug'))
    return api_response(messages.DELETE_PRODUCT_SUCCESS)

@bp.route('/image', methods=['POST'])
@admin_required
def upload_product_image():
    file_name = product_service.upload_product_image(request.form.get('slug'), request.files.get('image'))
    return api_response(messages.UPLOAD_IMAGE_SUCCESS, {'imageFileName': file_name}, status_code=201)
