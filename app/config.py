"""
Application configuration loaded from environment variables
"""
import os
from dataclasses import dataclass, field
from typing import Any, Dict, List


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() == 'true'


@dataclass
class Config:
    """Runtime settings for the E-Mart backend"""
    secret_key: str = 'dev-secret-key-change-in-production'
    database_url: str = 'sqlite:///emart.db'
    upload_folder: str = 'upload'
    max_content_length: int = 10 * 1024 * 1024
    cors_origins: List[str] = field(default_factory=list)
    mail_server: str = ''
    mail_port: int = 465
    mail_username: str = ''
    mail_password: str = ''
    mail_use_ssl: bool = True
    mail_domain: str = 'http://localhost:3000'
    newsletter_token_max_age: int = 24 * 60 * 60
    account_token_max_age: int = 60 * 60
    ratelimit_enabled: bool = True
    restore_quantity_once: bool = False

    @classmethod
    def from_env(cls) -> 'Config':
        """Read settings from the process environment"""
        return cls(
            secret_key=os.getenv('SECRET_KEY', cls.secret_key),
            database_url=os.getenv('DATABASE_URL', cls.database_url),
            upload_folder=os.getenv('UPLOAD_FOLDER', os.path.abspath(cls.upload_folder)),
            max_content_length=int(os.getenv('MAX_CONTENT_LENGTH', str(cls.max_content_length))),
            cors_origins=os.getenv('CORS_ORIGIN', '').split(),
            mail_server=os.getenv('MAIL_SERVER', cls.mail_server),
            mail_port=int(os.getenv('MAIL_PORT', str(cls.mail_port))),
            mail_username=os.getenv('MAIL_USERNAME', cls.mail_username),
            mail_password=os.getenv('MAIL_PASSWORD', cls.mail_password),
            mail_use_ssl=_env_bool('MAIL_USE_SSL', 'true'),
            mail_domain=os.getenv('MAIL_DOMAIN', cls.mail_domain),
            newsletter_token_max_age=int(os.getenv('NEWSLETTER_TOKEN_MAX_AGE', str(cls.newsletter_token_max_age))),
            account_token_max_age=int(os.getenv('ACCOUNT_TOKEN_MAX_AGE', str(cls.account_token_max_age))),
            ratelimit_enabled=_env_bool('RATELIMIT_ENABLED', 'true'),
            restore_quantity_once=_env_bool('RESTORE_QUANTITY_ONCE', 'false'),
        )

    def to_flask_config(self) -> Dict[str, Any]:
        return {
            'SECRET_KEY': self.secret_key,
            'SQLALCHEMY_DATABASE_URI': self.database_url,
            'SQLALCHEMY_TRACK_MODIFICATIONS': False,
            'UPLOAD_FOLDER': self.upload_folder,
            'MAX_CONTENT_LENGTH': self.max_content_length,
            'CORS_ORIGINS': self.cors_origins,
            'MAIL_SERVER': self.mail_server,
            'MAIL_PORT': self.mail_port,
            'MAIL_USERNAME': self.mail_username,
            'MAIL_PASSWORD': self.mail_password,
            'MAIL_USE_SSL': self.mail_use_ssl,
            'MAIL_DOMAIN': self.mail_domain,
            'NEWSLETTER_TOKEN_MAX_AGE': self.newsletter_token_max_age,
            'ACCOUNT_TOKEN_MAX_AGE': self.account_token_max_age,
            'RATELIMIT_ENABLED': self.ratelimit_enabled,
            'RESTORE_QUANTITY_ONCE': self.restore_quantity_once,
        }
