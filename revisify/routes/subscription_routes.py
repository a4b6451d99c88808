from flask import Blueprint

from ..repositories import store
from ..services.checkout_service import checkout_settings
from ..services.quota_service import is_entitled
from ..utils.plan_limits import project_limit_for
from ..utils.response import api_response
from .auth_routes import token_required

subscription_bp = Blueprint("subscription", __name__)


@subscription_bp.route("/status", methods=["GET"])
@token_required
def subscription_status(session):
    plan = "pro" if is_entitled(session.account_id) else "free"
    return api_response(True, "Subscription status fetched", {
        "plan": plan,
        "is_pro": plan == "pro",
        "project_count": store.count_projects(session.account_id),
        "project_limit": project_limit_for(plan),
    })


@subscription_bp.route("/checkout", methods=["POST"])
@token_required
def start_checkout(session):
    store.upsert_account(session.account_id, session.email)
    if is_entitled(session.account_id):
        return api_response(True, "You are already on the Pro plan.", {"plan": "pro"})
    return api_response(True, "Checkout ready", checkout_settings(session))
