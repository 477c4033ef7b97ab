from flask import Blueprint, current_app, jsonify

bp = Blueprint('main', __name__)

@bp.route('/')
def index():
    current_app.logger.info('Index accessed', extra={
        'event_type': 'page_view',
        'page': 'index'
    })
    return jsonify({'message': 'Ok.'}), 200

@bp.route('/health')
def health():
    current_app.logger.debug('Health check endpoint called')
    return jsonify({'status': 'healthy'}), 200
