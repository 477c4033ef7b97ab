"""
Newsletter subscription with e-mailed confirmation links
"""
import logging

from flask import current_app
from itsdangerous import BadSignature, SignatureExpired, URLSafeTimedSerializer

from app import db
from app.models import NewsletterSubscriber
from app.services import messages
from app.services.account_service import validate_email
from app.services.database import transaction
from app.services.error_handler import BadRequestError, UnauthorizedError, require_text
from app.services.mail_service import send_link_mail, storefront_link

logger = logging.getLogger(__name__)

TOKEN_SALT = 'newsletter-subscribe'


def _serializer() -> URLSafeTimedSerializer:
    return URLSafeTimedSerializer(current_app.config['SECRET_KEY'], salt=TOKEN_SALT)


def make_token(email: str) -> str:
    return _serializer().dumps({'email': email})


def send_confirmation_mail(email: str, token: str):
    send_link_mail(email, messages.SUBSCRIBE_NEWSLETTER_EMAIL_SUBJECT,
                   messages.SUBSCRIBE_NEWSLETTER_EMAIL_LINK_TEXT,
                   storefront_link('newsletter-subscribe', token))


def subscribe(email: str) -> None:
    require_text(email=email)
    if not email:
        raise BadRequestError(messages.missing_parameters('email'))
    email = email.lower()
    validate_email(email)

    if NewsletterSubscriber.query.filter_by(email=email).first():
        return

    send_confirmation_mail(email, make_token(email))


def confirm(token: str) -> None:
    require_text(newsletterToken=token)
    if not token:
        raise BadRequestError(messages.missing_parameters('newsletterToken'))

    try:
        payload = _serializer().loads(token, max_age=current_app.config['NEWSLETTER_TOKEN_MAX_AGE'])
    except SignatureExpired:
        raise UnauthorizedError(messages.EXPIRED_REQUEST)
    except BadSignature:
        raise UnauthorizedError(messages.INVALID_REQUEST)

    email = payload.get('email') if isinstance(payload, dict) else None
    if not email:
        raise UnauthorizedError(messages.INVALID_REQUEST)
    validate_email(email)

    with transaction():
        if NewsletterSubscriber.query.filter_by(email=email).first():
            return
        db.session.add(NewsletterSubscriber(email=email))
        db.session.flush()

    logger.info(f'Newsletter subscriber added: {email}', extra={'event_type': 'newsletter_subscribed'})
