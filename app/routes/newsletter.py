from flask import Blueprint

from app.routes.helpers import request_payload
from app.services import messages, newsletter_service
from app.services.error_handler import api_response
from app.services.security_service import (
    NEWSLETTER_CONFIRM_LIMIT, NEWSLETTER_SUBSCRIBE_LIMIT, rate_limited
)

bp = Blueprint('newsletter', __name__, url_prefix='/newsletter')

def _subscriber_email():
    email = request_payload().get('email')
    return str(email).lower() if email else None

@bp.route('/subscribe', methods=['POST'])
@rate_limited(NEWSLETTER_SUBSCRIBE_LIMIT, key_func=_subscriber_email)
def subscribe():
    newsletter_service.subscribe(request_payload().get('email'))
    return api_response(messages.SUBSCRIBE_NEWSLETTER_SUCCESS)

@bp.route('/confirm', methods=['POST'])
@rate_limited(NEWSLETTER_CONFIRM_LIMIT)
def confirm():
    newsletter_service.confirm(request_payload().get('newsletterToken'))
    return api_response(messages.SUBSCRIBE_NEWSLETTER_CONFIRMATION_SUCCESS)
