from flask import Blueprint

from ..repositories.share_reader import SharedProjectReader
from ..schemas.project_schema import serialize_shared_view
from ..utils.response import api_response

share_bp = Blueprint("share", __name__)

reader = SharedProjectReader()


@share_bp.route("/<token>", methods=["GET"])
def shared_project(token):
    """Anonymous read-only view; no Authorization header is looked at."""
    view = reader.resolve(token)
    return api_response(True, "Shared project fetched", serialize_shared_view(view))
