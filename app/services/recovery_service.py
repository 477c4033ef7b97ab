"""
Password recovery through a mailed reset link
"""
import logging

from app import db
from app.models import User
from app.services import messages
from app.services.account_service import (
    account_fingerprint, make_account_token, read_account_token, token_user,
    validate_email, validate_password
)
from app.services.database import transaction
from app.services.error_handler import BadRequestError, require_text
from app.services.mail_service import send_link_mail, storefront_link

logger = logging.getLogger(__name__)

PASSWORD_RESET_SALT = 'password-reset'


def _password_fingerprint(user: User) -> str:
    return account_fingerprint(user.password_hash)


def forgot_password(email: str) -> None:
    """
    Mail a reset link to the account registered under ``email``. Unknown
    addresses return normally and send nothing.
    """
    require_text(email=email)
    if not email:
        raise BadRequestError(messages.missing_parameters('email'))
    email = email.lower()
    validate_email(email)

    user = User.query.filter_by(email=email).first()
    if user is None:
        logger.info('Password reset requested for an unknown email', extra={
            'event_type': 'password_reset_unknown_email'
        })
        return

    token = make_account_token(PASSWORD_RESET_SALT, user.username, _password_fingerprint(user))
    send_link_mail(email, messages.FORGOT_PASSWORD_EMAIL_SUBJECT,
                   messages.FORGOT_PASSWORD_EMAIL_LINK_TEXT,
                   storefront_link('reset-password', token))

    logger.info(f'Password reset link sent for {user.username}', extra={
        'event_type': 'password_reset_requested'
    })


def reset_password(token: str, new_password: str) -> None:
    require_text(token=token, newPassword=new_password)
    if not token:
        raise BadRequestError(messages.RESET_PASSWORD_TOKEN_MISSING)
    if not new_password:
        raise BadRequestError(messages.RESET_PASSWORD_NEW_PASSWORD_MISSING)
    validate_password(new_password)

    payload = read_account_token(PASSWORD_RESET_SALT, token)

    with transaction():
        user = token_user(payload, _password_fingerprint)
        user.set_password(new_password)
        db.session.flush()

    logger.info(f'Password reset for {user.username}', extra={'event_type': 'password_reset'})
