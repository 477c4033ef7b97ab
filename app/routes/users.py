from flask import Blueprint, current_app, request
from flask_login import current_user, login_required, logout_user

from app.routes.helpers import pagination_args, request_payload
from app.services import account_service, messages
from app.services.error_handler import api_response
from app.services.security_service import (
    UPDATE_USER_INFO_LIMIT, account_owner_required, admin_required, rate_limited
)

bp = Blueprint('users', __name__, url_prefix='/user')

def _url_username():
    return (request.view_args or {}).get('username', '').lower() or None

@bp.route('', methods=['GET'])
@login_required
def get_current_user():
    return api_response(messages.GET_DATA_SUCCESS, current_user.to_dict())

# Admin user management

@bp.route('/admin-get-users', methods=['GET'])
@admin_required
def get_users_as_admin():
    page, item_per_page = pagination_args(12)
    result = account_service.get_users_as_admin(page, item_per_page)
    return api_response(messages.GET_DATA_SUCCESS, result)

@bp.route('/admin-create', methods=['POST'])
@admin_required
def create_user_as_admin():
    data = request_payload()
    user = account_service.create_user_as_admin(
        data.get('email'),
        data.get('username'),
        data.get('password'),
        data.get('role'),
        avatar=request.files.get('avatarImage'),
    )
    return api_response(messages.REGISTER_SUCCESS, user.to_dict(), status_code=201)

@bp.route('/admin-update', methods=['PATCH'])
@admin_required
def update_user_as_admin():
    data = request_payload()
    account_service.update_user_as_admin(
        data.get('targetUsername'),
        email=data.get('email'),
        username=data.get('username'),
        password=data.get('password'),
        role=data.get('role'),
    )
    return api_response(messages.UPDATE_USER_AS_ADMIN_SUCCESS)

@bp.route('/admin-delete', methods=['DELETE'])
@admin_required
def delete_user_as_admin():
    account_service.delete_user_as_admin(request_payload().get('username'))
    return api_response(messages.DELETE_USER_SUCCESS)

@bp.route('/admin-upload-avatar', methods=['POST'])
@admin_required
def upload_user_avatar_as_admin():
    file_name = account_service.upload_user_avatar(request.form.get('username'),
                                                   request.files.get('avatarImage'))
    return api_response(messages.UPLOAD_IMAGE_SUCCESS, {'avatarFileName': file_name}, status_code=201)

# Self-service

@bp.route('/update-email-address', methods=['POST'])
def update_email_address():
    account_service.update_email_address(request_payload().get('token'))
    return api_response(messages.UPDATE_EMAIL_SUCCESS)

@bp.route('/<username>', methods=['GET'])
@account_owner_required
def get_info(username):
    return api_response(messages.GET_DATA_SUCCESS, account_service.get_info(username))

@bp.route('/<username>', methods=['PATCH'])
@rate_limited(UPDATE_USER_INFO_LIMIT, key_func=_url_username)
@account_owner_required
def update_info(username):
    account_service.update_info(username, email=request_payload().get('email'))
    return api_response(messages.UPDATE_USER_INFO_SUCCESS)

@bp.route('/<username>/update-password', methods=['POST'])
@account_owner_required
def update_password(username):
    data = request_payload()
    account_service.update_password(username, data.get('currentPassword'), data.get('newPassword'))
    return api_response(messages.UPDATE_PASSWORD_SUCCESS)

@bp.route('/<username>/delete-user', methods=['POST'])
@account_owner_required
def delete_user(username):
    account_service.delete_user(username, request_payload().get('currentPassword'))
    logout_user()

    current_app.logger.info(f'User {username} deleted their account', extra={
        'event_type': 'account_closed'
    })
    return api_response(messages.DELETE_USER_SUCCESS)

@bp.route('/<username>/upload-avatar', methods=['POST'])
@account_owner_required
def upload_user_avatar(username):
    file_name = account_service.upload_user_avatar(username, request.files.get('avatarImage'))
    return api_response(messages.UPLOAD_IMAGE_SUCCESS, {'avatarFileName': file_name}, status_code=201)
