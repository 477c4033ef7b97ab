"""
Logging configuration with request context
"""
import logging
import sys
from flask import has_request_context, request

class RequestFormatter(logging.Formatter):
    """Custom formatter that adds request context to logs"""

    def format(self, record):
        if has_request_context():
            record.url = request.url
            record.method = request.method
            record.remote_addr = request.remote_addr
        else:
            record.url = 'N/A'
            record.method = 'N/A'
            record.remote_addr = 'N/A'

        return super().format(record)


def setup_logging(app):
    """
    Setup logging for the Flask app and the service loggers under ``app``.
    New Relic picks these records up when the agent is running.
    """
    formatter = RequestFormatter(
        '%(asctime)s - %(name)s - %(levelname)s - '
        '[%(method)s %(url)s] - '
        '[IP: %(remote_addr)s] - '
        '%(message)s'
    )

    # Console handler
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(logging.INFO)
    console_handler.setFormatter(formatter)

    # app.logger is the "app" logger, so service modules logging through
    # logging.getLogger(__name__) ("app.services.*") end up here too
    app.logger.setLevel(logging.INFO)
    for handler in list(app.logger.handlers):
        if isinstance(handler.formatter, RequestFormatter):
            app.logger.removeHandler(handler)
    app.logger.addHandler(console_handler)

    # Prevent duplicate logs
    app.logger.propagate = False

    app.logger.info('Application logging configured', extra={
        'event_type': 'app_startup',
        'testing': app.config.get('TESTING', False)
    })

    return app.logger
