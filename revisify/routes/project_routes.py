from flask import Blueprint, request

from ..repositories import store
from ..schemas.project_schema import (
    serialize_project,
    serialize_project_detail,
    serialize_revision,
)
from ..services import quota_service
from ..utils.response import api_response
from ..utils.scope_status import scope_status
from .auth_routes import token_required

project_bp = Blueprint("projects", __name__)


@project_bp.route("", methods=["GET"])
@token_required
def list_projects(session):
    projects = store.list_projects(session.account_id)
    return api_response(True, "Projects fetched", {
        "projects": [serialize_project(p) for p in projects],
    })


@project_bp.route("", methods=["POST"])
@token_required
def create_project(session):
    data = request.get_json(silent=True) or {}

    project = quota_service.create_project(
        session,
        project_name=data.get("project_name"),
        client_name=data.get("client_name"),
        scope=data.get("scope"),
        revision_limit=data.get("revision_limit"),
        extra_revision_cost=data.get("extra_revision_cost", 0),
    )
    return api_response(True, "Project created successfully.", serialize_project(project), status=201)


@project_bp.route("/<project_id>", methods=["GET"])
@token_required
def get_project(session, project_id):
    project, revisions = quota_service.project_detail(session, project_id)
    return api_response(True, "Project fetched", serialize_project_detail(project, revisions))


@project_bp.route("/<project_id>/revisions", methods=["POST"])
@token_required
def add_revision(session, project_id):
    data = request.get_json(silent=True) or {}

    revision = quota_service.record_revision(session, project_id, data.get("note"))

    project = store.get_project(project_id, account_id=session.account_id)
    count = store.count_revisions(project.id)
    return api_response(True, "Revision logged.", {
        "revision": serialize_revision(revision),
        "revisions_used": count,
        "status": scope_status(count, project.revision_limit).value,
    }, status=201)
