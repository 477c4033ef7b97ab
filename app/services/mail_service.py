"""
Outgoing mail carrying a single link back to the storefront
"""
import logging
import smtplib
from email.message import EmailMessage

from flask import current_app

from app.services.error_handler import ServerError

logger = logging.getLogger(__name__)


def storefront_link(path: str, token: str) -> str:
    return f"{current_app.config['MAIL_DOMAIN']}/{path}?token={token}"


def send_link_mail(email: str, subject: str, link_text: str, link: str):
    """Send ``link`` to ``email``; without a configured MAIL_SERVER the link is only logged"""
    config = current_app.config

    if not config.get('MAIL_SERVER'):
        logger.info(f'Mail server not configured, link for {email}: {link}', extra={
            'event_type': 'mail_skipped',
            'mail_subject': subject
        })
        return

    message = EmailMessage()
    message['Subject'] = subject
    message['From'] = f"no-reply <{config['MAIL_USERNAME']}>"
    message['To'] = email
    message.set_content(f'{link_text}\n{link}')
    message.add_alternative(f'<a href="{link}">{link_text}</a>', subtype='html')

    smtp_class = smtplib.SMTP_SSL if config['MAIL_USE_SSL'] else smtplib.SMTP
    try:
        with smtp_class(config['MAIL_SERVER'], config['MAIL_PORT'], timeout=30) as smtp:
            if config['MAIL_USERNAME']:
                smtp.login(config['MAIL_USERNAME'], config['MAIL_PASSWORD'])
            smtp.send_message(message)
    except (smtplib.SMTPException, OSError) as e:
        raise ServerError(f'Sending mail "{subject}" failed: {e}')

    logger.info(f'Mail "{subject}" sent to {email}', extra={
        'event_type': 'mail_sent',
        'mail_subject': subject
    })
