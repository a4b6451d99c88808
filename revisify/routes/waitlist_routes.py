import re

from flask import Blueprint, request

from ..errors import InvalidInput
from ..repositories import store
from ..utils.response import api_response

waitlist_bp = Blueprint("waitlist", __name__)

EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


@waitlist_bp.route("", methods=["POST"])
def join_waitlist():
    data = request.get_json(silent=True) or {}
    email = (data.get("email") or "").strip().lower()

    if not EMAIL_RE.match(email) or len(email) > 255:
        raise InvalidInput("A valid email is required")

    created = store.add_to_waitlist(email)
    # Signing up twice is not an error for the visitor
    return api_response(True, "You're on the list!", {"email": email, "new": created})
