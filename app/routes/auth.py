from flask import Blueprint, current_app
from flask_login import current_user, login_user, logout_user

from app.routes.helpers import request_payload
from app.services import account_service, messages
from app.services.error_handler import UnauthorizedError, api_response
from app.services.security_service import AUTHORIZE_LIMIT, rate_limited

bp = Blueprint('auth', __name__, url_prefix='/authorize')
register_bp = Blueprint('register', __name__, url_prefix='/register')

@bp.route('', methods=['POST'])
@rate_limited(AUTHORIZE_LIMIT)
def authorize():
    data = request_payload()
    user = account_service.authenticate(data.get('username'), data.get('password'))
    login_user(user, remember=True)

    current_app.logger.info(f'User {user.username} logged in', extra={
        'event_type': 'login',
        'user_id': user.id
    })
    return api_response(messages.AUTHORIZE_SUCCESS, user.to_dict())

@bp.route('/deauthorize', methods=['POST'])
@rate_limited(AUTHORIZE_LIMIT)
def deauthorize():
    if current_user.is_authenticated:
        current_app.logger.info(f'User {current_user.username} logged out', extra={
            'event_type': 'logout',
            'user_id': current_user.id
        })
    logout_user()
    return api_response(messages.DEAUTHORIZE_SUCCESS)

@bp.route('/verifySession', methods=['POST'])
def verify_session():
    if not current_user.is_authenticated:
        raise UnauthorizedError(messages.INVALID_TOKEN)
    return api_response(messages.VERIFY_SESSION_SUCCESS, current_user.to_dict())

@register_bp.route('', methods=['POST'])
def register():
    data = request_payload()
    account_service.register(data.get('username'), data.get('email'), data.get('password'))
    return api_response(messages.REGISTER_SUCCESS, status_code=201)
