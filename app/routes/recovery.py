from flask import Blueprint

from app.routes.helpers import request_payload
from app.services import messages, recovery_service
from app.services.error_handler import api_response
from app.services.security_service import FORGOT_PASSWORD_LIMIT, rate_limited

bp = Blueprint('recovery', __name__, url_prefix='/recovery')

def _recovery_email():
    email = request_payload().get('email')
    return str(email).lower() if email else None

@bp.route('/forgot-password', methods=['POST'])
@rate_limited(FORGOT_PASSWORD_LIMIT, key_func=_recovery_email)
def forgot_password():
    recovery_service.forgot_password(request_payload().get('email'))
    return api_response(messages.FORGOT_PASSWORD_SUCCESS)

@bp.route('/reset-password', methods=['POST'])
def reset_password():
    data = request_payload()
    recovery_service.reset_password(data.get('token'), data.get('newPassword'))
    return api_response(messages.RESET_PASSWORD_SUCCESS)
