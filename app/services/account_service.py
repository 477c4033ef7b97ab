"""
Accounts: registration, credential checks, self-service profile changes and
user management for admins

Links mailed to users (email change, password reset) carry a signed token
holding a fingerprint of the account state they were issued for, so a token
stops working once the password or email it was based on has changed.
"""
import hashlib
import logging
import re
from typing import Any, Callable, Dict, Optional

from flask import current_app
from itsdangerous import BadSignature, SignatureExpired, URLSafeTimedSerializer
from werkzeug.datastructures import FileStorage

from app import db
from app.models import User
from app.models.user import ROLES
from app.services import messages
from app.services.database import get_offset, page_meta, transaction
from app.services.error_handler import (
    BadRequestError, NotFoundError, UnauthorizedError, require_text
)
from app.services.image_storage import delete_image, ensure_image, prepare_image
from app.services.mail_service import send_link_mail, storefront_link

logger = logging.getLogger(__name__)

USERNAME_PATTERN = re.compile(r'^[a-zA-Z0-9]+$')
EMAIL_PATTERN = re.compile(r'^[^@\s]+@[^@\s]+\.[^@\s]+$')

AVATAR_KIND = 'avatar'
EMAIL_UPDATE_SALT = 'update-email'


def validate_username(username: str):
    if not 6 <= len(username) <= 16:
        raise BadRequestError(messages.INVALID_USERNAME_LENGTH)
    if not USERNAME_PATTERN.match(username):
        raise BadRequestError(messages.INVALID_USERNAME_CHARACTERS)


def validate_password(password: str):
    if not 8 <= len(password) <= 32:
        raise BadRequestError(messages.INVALID_PASSWORD_LENGTH)


def validate_email(email: str):
    if not EMAIL_PATTERN.match(email):
        raise BadRequestError(messages.INVALID_EMAIL)


def _validated(validator: Callable[[str], None], value: str, message: str):
    """Run ``validator`` and report any failure with ``message`` instead"""
    try:
        validator(value)
    except BadRequestError:
        raise BadRequestError(message)


def _check_available(username: Optional[str] = None, email: Optional[str] = None):
    if username and User.query.filter_by(username=username).first():
        raise BadRequestError(messages.USERNAME_ALREADY_EXIST)
    if email and User.query.filter_by(email=email).first():
        raise BadRequestError(messages.EMAIL_ALREADY_EXIST)


def find_user(username: str, lock: bool = False) -> User:
    query = User.query.filter_by(username=username)
    if lock:
        query = query.with_for_update()
    user = query.first()
    if user is None:
        raise NotFoundError(f'{messages.USER_NOT_FOUND} ({username})')
    return user


# ---------------------------------------------------------------------------
# Mailed account tokens
# ---------------------------------------------------------------------------

def _serializer(salt: str) -> URLSafeTimedSerializer:
    return URLSafeTimedSerializer(current_app.config['SECRET_KEY'], salt=salt)


def account_fingerprint(*parts: str) -> str:
    return hashlib.sha256('\0'.join(parts).encode()).hexdigest()[:16]


def make_account_token(salt: str, username: str, fingerprint: str, **claims) -> str:
    return _serializer(salt).dumps(dict(claims, username=username, fingerprint=fingerprint))


def read_account_token(salt: str, token: str) -> Dict[str, Any]:
    try:
        payload = _serializer(salt).loads(token, max_age=current_app.config['ACCOUNT_TOKEN_MAX_AGE'])
    except SignatureExpired:
        raise UnauthorizedError(messages.EXPIRED_REQUEST)
    except BadSignature:
        raise UnauthorizedError(messages.INVALID_TOKEN)

    if not isinstance(payload, dict) or not isinstance(payload.get('username'), str):
        raise UnauthorizedError(messages.INVALID_TOKEN)
    return payload


def token_user(payload: Dict[str, Any], fingerprint_of: Callable[[User], str]) -> User:
    """Lock the user a token was issued to; fails once the fingerprinted state changed"""
    user = User.query.filter_by(username=payload['username']).with_for_update().first()
    if user is None or payload.get('fingerprint') != fingerprint_of(user):
        raise UnauthorizedError(messages.INVALID_TOKEN)
    return user


def _email_fingerprint(user: User) -> str:
    return account_fingerprint(user.password_hash, user.email)


# ---------------------------------------------------------------------------
# Registration and login
# ---------------------------------------------------------------------------

def register(username: str, email: str, password: str) -> User:
    require_text(username=username, email=email, password=password)
    if not username or not password or not email:
        raise BadRequestError(messages.missing_parameters('username', 'password', 'email'))

    username = username.lower()
    email = email.lower()
    validate_username(username)
    validate_password(password)
    validate_email(email)

    with transaction():
        _check_available(username=username, email=email)

        user = User(username=username, email=email)
        user.set_password(password)
        db.session.add(user)
        db.session.flush()

    logger.info(f'User registered: {username}', extra={'event_type': 'user_registered'})
    return user


def authenticate(username: str, password: str) -> User:
    require_text(username=username, password=password)
    if not username or not password:
        raise BadRequestError(messages.missing_parameters('username', 'password'))

    user = User.query.filter_by(username=username.lower()).first()
    if user is None or not user.check_password(password):
        logger.warning(f'Login failed for user: {username}', extra={'event_type': 'login_failed'})
        raise UnauthorizedError(messages.INVALID_USERNAME_OR_PASSWORD)

    logger.info(f'Login successful for user: {username}', extra={'event_type': 'login_success'})
    return user


# ---------------------------------------------------------------------------
# Self-service
# ---------------------------------------------------------------------------

def get_info(username: str) -> Dict[str, Any]:
    return find_user(username).to_dict()


def update_info(username: str, email: Optional[str] = None) -> None:
    """
    Apply profile changes. A new email address is not written directly: a
    confirmation link is mailed to it instead.
    """
    require_text(email=email)
    if not email:
        return

    email = email.lower()
    validate_email(email)

    user = find_user(username)
    if email == user.email:
        return
    _check_available(email=email)

    token = make_account_token(EMAIL_UPDATE_SALT, user.username, _email_fingerprint(user),
                               newEmail=email)
    send_link_mail(email, messages.UPDATE_EMAIL_ADDRESS_EMAIL_SUBJECT,
                   messages.UPDATE_EMAIL_ADDRESS_EMAIL_LINK_TEXT,
                   storefront_link('update-email', token))

    logger.info(f'Email change requested by {username}', extra={
        'event_type': 'email_change_requested'
    })


def update_email_address(token: str) -> None:
    require_text(token=token)
    if not token:
        raise BadRequestError(messages.UPDATE_EMAIL_TOKEN_MISSING)

    payload = read_account_token(EMAIL_UPDATE_SALT, token)
    new_email = payload.get('newEmail')
    if not isinstance(new_email, str) or not EMAIL_PATTERN.match(new_email):
        raise UnauthorizedError(messages.INVALID_TOKEN)

    with transaction():
        user = token_user(payload, _email_fingerprint)
        _check_available(email=new_email)
        user.email = new_email
        db.session.flush()

    logger.info(f'Email address updated for {user.username}', extra={
        'event_type': 'email_updated'
    })


def update_password(username: str, current_password: str, new_password: str) -> None:
    require_text(currentPassword=current_password, newPassword=new_password)
    if not username or not current_password or not new_password:
        raise BadRequestError(messages.missing_parameters('username', 'currentPassword', 'newPassword'))

    if new_password == current_password:
        raise BadRequestError(messages.UPDATE_PASSWORD_NEW_MATCH_OLD)
    validate_password(new_password)

    with transaction():
        user = find_user(username, lock=True)
        if not user.check_password(current_password):
            raise BadRequestError(messages.UPDATE_PASSWORD_INCORRECT_OLD_PASSWORD)
        user.set_password(new_password)
        db.session.flush()

    logger.info(f'Password updated for {username}', extra={'event_type': 'password_updated'})


def _delete_user(user: User) -> Optional[str]:
    avatar_file_name = user.avatar_file_name
    db.session.delete(user)
    db.session.flush()
    return avatar_file_name


def delete_user(username: str, current_password: str) -> None:
    require_text(currentPassword=current_password)
    if not username or not current_password:
        raise BadRequestError(messages.missing_parameters('username', 'currentPassword'))

    with transaction():
        user = find_user(username, lock=True)
        if not user.check_password(current_password):
            raise BadRequestError(messages.DELETE_USER_INCORRECT_PASSWORD)
        avatar_file_name = _delete_user(user)

    delete_image(AVATAR_KIND, avatar_file_name)
    logger.info(f'User deleted: {username}', extra={'event_type': 'user_deleted'})


def upload_user_avatar(username: str, image: Optional[FileStorage]) -> str:
    require_text(username=username)
    if not username or image is None:
        raise BadRequestError(messages.missing_parameters('username', 'avatarImage'))
    ensure_image(image)

    with transaction():
        user = find_user(username.lower())
        old_file_name = user.avatar_file_name
        pending_image = prepare_image(AVATAR_KIND, image)
        user.avatar_file_name = pending_image.file_name
        db.session.flush()

    pending_image.save()
    if old_file_name and old_file_name != pending_image.file_name:
        delete_image(AVATAR_KIND, old_file_name)

    return pending_image.file_name


# ---------------------------------------------------------------------------
# Admin user management
# ---------------------------------------------------------------------------

def get_users_as_admin(page: int = 1, item_per_page: int = 12) -> Dict[str, Any]:
    page = max(1, page)
    item_per_page = max(1, item_per_page)

    users = (User.query
             .order_by(User.id)
             .offset(get_offset(page, item_per_page))
             .limit(item_per_page)
             .all())
    total_users = User.query.count()

    return {
        'meta': page_meta('user/admin-get-users', page, item_per_page, total_users),
        'users': [user.to_dict() for user in users],
    }


def create_user_as_admin(email: str, username: str, password: str, role: str,
                         avatar: Optional[FileStorage] = None) -> User:
    require_text(email=email, username=username, password=password, role=role)
    if not email or not username or not password or not role:
        raise BadRequestError(messages.missing_parameters('email', 'username', 'password', 'role'))

    username = username.lower()
    email = email.lower()
    for validator, value in ((validate_username, username), (validate_password, password),
                             (validate_email, email)):
        _validated(validator, value, messages.INVALID_REGISTER_INFORMATION)
    if role not in ROLES:
        raise BadRequestError(messages.INVALID_REGISTER_INFORMATION)
    ensure_image(avatar)

    with transaction():
        _check_available(username=username, email=email)
        pending_image = prepare_image(AVATAR_KIND, avatar)

        user = User(username=username, email=email, role=role,
                    avatar_file_name=pending_image.file_name if pending_image else None)
        user.set_password(password)
        db.session.add(user)
        db.session.flush()

    if pending_image:
        pending_image.save()

    logger.info(f'User {username} created by an admin', extra={
        'event_type': 'user_created',
        'role': role
    })
    return user


def update_user_as_admin(target_username: str, email: Optional[str] = None,
                         username: Optional[str] = None, password: Optional[str] = None,
                         role: Optional[str] = None) -> None:
    """Change any of email, username, password and role of ``target_username``"""
    require_text(targetUsername=target_username, email=email, username=username,
                 password=password, role=role)
    if not target_username:
        raise BadRequestError(messages.missing_parameters('targetUsername'))

    target_username = target_username.lower()
    email = email.lower() if email else None
    username = username.lower() if username else None

    with transaction():
        user = find_user(target_username, lock=True)

        if email and email != user.email:
            _validated(validate_email, email, messages.UPDATE_USER_AS_ADMIN_ERROR)
            _check_available(email=email)
            user.email = email

        if username and username != user.username:
            _validated(validate_username, username, messages.UPDATE_USER_AS_ADMIN_ERROR)
            _check_available(username=username)
            user.username = username

        if role:
            if role not in ROLES:
                raise BadRequestError(messages.UPDATE_USER_AS_ADMIN_ERROR)
            user.role = role

        if password:
            _validated(validate_password, password, messages.UPDATE_USER_AS_ADMIN_ERROR)
            user.set_password(password)

        db.session.flush()

    logger.info(f'User {target_username} updated by an admin', extra={
        'event_type': 'user_updated',
        'username': user.username
    })


def delete_user_as_admin(username: str) -> None:
    require_text(username=username)
    if not username:
        raise BadRequestError(messages.missing_parameters('username'))
    username = username.lower()

    with transaction():
        avatar_file_name = _delete_user(find_user(username, lock=True))

    delete_image(AVATAR_KIND, avatar_file_name)
    logger.info(f'User {username} deleted by an admin', extra={'event_type': 'user_deleted'})
