from functools import wraps

from flask import Blueprint, request

from ..repositories import store
from ..services.identity_service import authenticate
from ..services.quota_service import is_entitled
from ..utils.plan_limits import project_limit_for
from ..utils.response import api_response

auth_bp = Blueprint("auth", __name__)


def token_required(f):
    """Resolve the bearer token into a SessionContext passed as first argument."""

    @wraps(f)
    def decorated(*args, **kwargs):
        session = authenticate(request.headers.get("Authorization"))
        return f(session, *args, **kwargs)

    return decorated


@auth_bp.route("/me", methods=["GET"])
@token_required
def me(session):
    store.upsert_account(session.account_id, session.email)
    plan = "pro" if is_entitled(session.account_id) else "free"
    return api_response(True, "Account fetched", {
        "id": session.account_id,
        "email": session.email,
        "plan": plan,
        "project_limit": project_limit_for(plan),
    })
