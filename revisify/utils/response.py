from flask import jsonify


def api_response(success: bool, message: str, data: dict | list | None = None,
                 status: int = 200, error: str | None = None):
    body = {
        "success": success,
        "message": message,
        "data": data,
    }
    if error:
        body["error"] = error
    return jsonify(body), status
