"""
Access control and rate limiting for the API
"""
import logging
import threading
import time
from dataclasses import dataclass
from functools import wraps
from typing import Callable, Dict, List, Optional

from flask import current_app, request
from flask_login import current_user

from app import login_manager
from app.services import messages
from app.services.error_handler import ForbiddenError, RateLimitError, UnauthorizedError

logger = logging.getLogger(__name__)
security_logger = logging.getLogger('app.security')


@dataclass
class RateLimit:
    """At most ``limit`` requests per ``window_seconds`` for one key"""
    name: str
    limit: int
    window_seconds: int


GLOBAL_LIMIT = RateLimit('global', 300, 60)
AUTHORIZE_LIMIT = RateLimit('authorize', 10, 60)
NEWSLETTER_SUBSCRIBE_LIMIT = RateLimit('newsletter_subscribe', 3, 180 * 60)
NEWSLETTER_CONFIRM_LIMIT = RateLimit('newsletter_confirm', 4, 180 * 60)
UPDATE_USER_INFO_LIMIT = RateLimit('update_user_info', 10, 5 * 60)
FORGOT_PASSWORD_LIMIT = RateLimit('forgot_password', 1, 180 * 60)


class RateLimiter:
    """In-memory sliding window limiter (per process)"""

    # Full sweep of idle keys every this many hits
    SWEEP_EVERY = 1000

    def __init__(self):
        self._storage: Dict[str, List[float]] = {}
        self._windows: Dict[str, int] = {}
        self._hits = 0
        self._lock = threading.Lock()

    def __len__(self):
        return len(self._storage)

    def hit(self, rule: RateLimit, key: str) -> bool:
        """Record a request; False when the key is over its limit"""
        storage_key = f'{rule.name}:{key}'
        current_time = time.time()
        window_start = current_time - rule.window_seconds

        with self._lock:
            self._hits += 1
            if self._hits % self.SWEEP_EVERY == 0:
                self._purge_expired(current_time)

            timestamps = [t for t in self._storage.get(storage_key, []) if t > window_start]
            self._windows[storage_key] = rule.window_seconds
            if len(timestamps) >= rule.limit:
                self._storage[storage_key] = timestamps
                return False
            timestamps.append(current_time)
            self._storage[storage_key] = timestamps
            return True

    def purge_expired(self):
        """Forget keys with no request left inside their window"""
        with self._lock:
            self._purge_expired(time.time())

    def _purge_expired(self, current_time: float):
        for storage_key in list(self._storage):
            window_start = current_time - self._windows[storage_key]
            timestamps = [t for t in self._storage[storage_key] if t > window_start]
            if timestamps:
                self._storage[storage_key] = timestamps
            else:
                del self._storage[storage_key]
                del self._windows[storage_key]

    def reset(self):
        with self._lock:
            self._storage.clear()
            self._windows.clear()
            self._hits = 0


rate_limiter = RateLimiter()


def _log_security_event(event_type: str, message: str):
    security_logger.warning(message, extra={
        'event_type': event_type,
        'endpoint': request.endpoint,
        'ip_address': request.remote_addr,
        'user_id': current_user.id if current_user.is_authenticated else None,
    })


def check_rate_limit(rule: RateLimit, key: Optional[str] = None):
    if not current_app.config.get('RATELIMIT_ENABLED', True):
        return
    key = key or request.remote_addr or 'unknown'
    if not rate_limiter.hit(rule, key):
        _log_security_event('RATE_LIMIT_EXCEEDED', f'Rate limit {rule.name} exceeded by {key}')
        raise RateLimitError(messages.RATE_LIMITED)


def rate_limited(rule: RateLimit, key_func: Optional[Callable[[], Optional[str]]] = None):
    """Decorator applying ``rule`` to a view, keyed by client IP unless ``key_func`` says otherwise"""
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            check_rate_limit(rule, key_func() if key_func else None)
            return f(*args, **kwargs)
        return decorated_function
    return decorator


def admin_required(f):
    """Only logged-in admins get through"""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        if not current_user.is_authenticated:
            _log_security_event('AUTHENTICATION_FAILED', 'Unauthenticated access attempt')
            raise UnauthorizedError(messages.INVALID_TOKEN)
        if not current_user.is_admin:
            _log_security_event('AUTHORIZATION_FAILED',
                                f'User {current_user.username} is not an admin')
            raise ForbiddenError(messages.INVALID_TOKEN)
        return f(*args, **kwargs)
    return decorated_function


def account_owner_required(f):
    """The logged-in user may only act on the ``<username>`` in the URL if it is their own"""
    @wraps(f)
    def decorated_function(username, *args, **kwargs):
        if not current_user.is_authenticated:
            _log_security_event('AUTHENTICATION_FAILED', 'Unauthenticated access attempt')
            raise UnauthorizedError(messages.INVALID_TOKEN)
        if username.lower() != current_user.username:
            _log_security_event('AUTHORIZATION_FAILED',
                                f'User {current_user.username} acted on account {username}')
            raise ForbiddenError(messages.INVALID_TOKEN)
        return f(current_user.username, *args, **kwargs)
    return decorated_function


@login_manager.unauthorized_handler
def handle_unauthorized():
    raise UnauthorizedError(messages.INVALID_TOKEN)


def register_request_guards(app):
    """Global rate limit for every request except CORS preflights"""

    @app.before_request
    def apply_global_rate_limit():
        if request.method != 'OPTIONS':
            check_rate_limit(GLOBAL_LIMIT)
