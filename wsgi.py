#!/usr/bin/env python3
"""
WSGI entry point (gunicorn wsgi:app, or run directly for local development)
"""
import os

from app import create_app

app = create_app()

if __name__ == '__main__':
    app.run(host='0.0.0.0', port=int(os.getenv('PORT', '5000')), debug=os.getenv('FLASK_DEBUG') == '1')
