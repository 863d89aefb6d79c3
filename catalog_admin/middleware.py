"""Request/response hooks shared by every blueprint."""
from flask import current_app, request


def _allowed_origin(origin):
    allowed = current_app.config.get('CORS_ORIGINS') or []
    if not origin:
        return None
    if '*' in allowed or origin in allowed:
        return origin
    return None


def handle_preflight():
    """
    Answer CORS preflight requests before the view is dispatched.

    Only matched routes from allowed origins are answered here. Unknown
    paths fall through to the 404 handler and other origins get the
    default OPTIONS response without CORS headers.
    """
    if request.method != 'OPTIONS' or request.url_rule is None:
        return None
    if not _allowed_origin(request.headers.get('Origin')):
        return None

    response = current_app.make_default_options_response()
    response.status_code = 204
    return response


def apply_cors_headers(response):
    """Attach CORS headers for allowed browser origins (credentials included)."""
    origin = _allowed_origin(request.headers.get('Origin'))
    if origin:
        response.headers['Access-Control-Allow-Origin'] = origin
        response.headers['Access-Control-Allow-Credentials'] = 'true'
        response.headers['Access-Control-Allow-Methods'] = 'GET, POST, PUT, DELETE, OPTIONS'
        response.headers['Access-Control-Allow-Headers'] = request.headers.get(
            'Access-Control-Request-Headers', 'Content-Type, Authorization'
        )
        response.headers.add('Vary', 'Origin')
    return response
