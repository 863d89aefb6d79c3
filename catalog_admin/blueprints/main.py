"""Main blueprint with liveness and health check endpoints."""
import logging

from flask import Blueprint, jsonify
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from catalog_admin.database import get_session

logger = logging.getLogger(__name__)

main_bp = Blueprint('main', __name__)


@main_bp.route('/')
def index():
    return 'application is running successfully'


@main_bp.route('/health')
def health():
    """
    Health check endpoint that validates the catalog database connection.

    Returns:
        200: database reachable
        500: database unreachable
    """
    try:
        get_session().execute(text("SELECT 1")).scalar()
    except SQLAlchemyError as e:
        logger.error(f"Health check failed: {e}")
        return jsonify({'success': False, 'database': 'disconnected', 'error': str(e)}), 500

    return jsonify({'success': True, 'database': 'connected'})
