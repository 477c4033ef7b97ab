from flask import Blueprint, request

from app.routes.helpers import pagination_args, request_payload
from app.services import category_service, messages
from app.services.error_handler import api_response
from app.services.security_service import admin_required

bp = Blueprint('categories', __name__, url_prefix='/category')

@bp.route('', methods=['GET'])
def list_categories():
    page, item_per_page = pagination_args(99999)
    result = category_service.get_categories(page, item_per_page)
    return api_response(messages.GET_DATA_SUCCESS, result)

@bp.route('/categoriesCount', methods=['GET'])
def categories_count():
    return api_response(messages.GET_DATA_SUCCESS, category_service.get_categories_count())

@bp.route('', methods=['POST'])
@admin_required
def create_category():
    data = request_payload()
    category = category_service.create_category(
        data.get('name'),
        data.get('desc'),
        data.get('priority'),
        image=request.files.get('image'),
    )
    return api_response(messages.CREATE_CATEGORY_SUCCESS, {'slug': category.slug}, status_code=201)

@bp.route('', methods=['PUT'])
@admin_required
def update_category():
    data = request_payload()
    category = category_service.update_category(
        data.get('slug'), data.get('name'), data.get('desc'), data.get('priority'))
    return api_response(messages.UPDATE_CATEGORY_SUCCESS, {'slug': category.slug})

@bp.route('', methods=['DELETE'])
@admin_required
def delete_category():
    data = request_payload()
    category_service.delete_category(data.get('slug'))
    return api_response(messages.DELETE_CATEGORY_SUCCESS)

@bp.route('/image', methods=['POST'])
@admin_required
def upload_category_image():
    file_name = category_service.upload_category_image(request.form.get('slug'), request.files.get('image'))
    return api_response(messages.UPLOAD_IMAGE_SUCCESS, {'imageFileName': file_name}, status_code=201)
