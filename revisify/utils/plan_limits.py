# utils/plan_limits.py
from flask import current_app, has_app_context

FREE_PROJECT_LIMIT = 1

PLAN_LIMITS = {
    "free": {
        "projects": FREE_PROJECT_LIMIT,  # active projects on the free tier
    },
    "pro": {
        "projects": None,                # unlimited
    },
}


def free_project_limit() -> int:
    """Free-tier project cap, overridable through FREE_PROJECT_LIMIT."""
    if has_app_context():
        return int(current_app.config.get("FREE_PROJECT_LIMIT", FREE_PROJECT_LIMIT))
    return FREE_PROJECT_LIMIT


def project_limit_for(plan: str):
    if plan == "pro":
        return PLAN_LIMITS["pro"]["projects"]
    return free_project_limit()
