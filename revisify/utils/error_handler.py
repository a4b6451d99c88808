import logging

from ..errors import RevisifyError
from .response import api_response

logger = logging.getLogger(__name__)


def register_error_handlers(app):
    @app.errorhandler(RevisifyError)
    def revisify_error(e):
        if e.status_code >= 500:
            logger.error("%s: %s", e.code, e.message)
        return api_response(False, e.message, None, status=e.status_code, error=e.code)

    @app.errorhandler(400)
    def bad_request(e):
        return api_response(False, "Bad Request", None, status=400, error="BAD_REQUEST")

    @app.errorhandler(401)
    def unauthorized(e):
        return api_response(False, "Unauthorized", None, status=401, error="UNAUTHENTICATED")

    @app.errorhandler(404)
    def not_found(e):
        return api_response(False, "Not Found", None, status=404, error="NOT_FOUND")

    @app.errorhandler(405)
    def method_not_allowed(e):
        return api_response(False, "Method Not Allowed", None, status=405, error="METHOD_NOT_ALLOWED")

    @app.errorhandler(500)
    def server_error(e):
        return api_response(False, "Server Error", None, status=500, error="SERVER_ERROR")
