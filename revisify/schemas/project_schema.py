from ..utils.scope_status import scope_status, usage_percent


def _iso(value):
    return value.isoformat() if value else None


def _scope_summary(count, limit) -> dict:
    return {
        "revisions_used": count,
        "revision_limit": limit,
        "status": scope_status(count, limit).value,
        "usage_percent": usage_percent(count, limit),
    }


def serialize_revision(revision) -> dict:
    return {
        "id": revision.id,
        "note": revision.note,
        "created_at": _iso(revision.created_at),
    }


def serialize_project(project, revision_count=None) -> dict:
    count = project.revision_count if revision_count is None else revision_count
    return {
        "id": project.id,
        "project_name": project.project_name,
        "client_name": project.client_name,
        "scope": project.scope,
        "revision_limit": project.revision_limit,
        "extra_revision_cost": str(project.extra_revision_cost),
        "share_token": project.share_token,
        "created_at": _iso(project.created_at),
        "scope_status": _scope_summary(count, project.revision_limit),
    }


def serialize_project_detail(project, revisions) -> dict:
    data = serialize_project(project, revision_count=len(revisions))
    data["revisions"] = [serialize_revision(r) for r in revisions]
    return data


def serialize_shared_view(view) -> dict:
    project = view.project
    return {
        "project": {
            "id": project.id,
            "project_name": project.project_name,
            "client_name": project.client_name,
            "scope": project.scope,
            "revision_limit": project.revision_limit,
            "created_at": _iso(project.created_at),
        },
        "revisions": [serialize_revision(r) for r in view.revisions],
        "scope_status": _scope_summary(len(view.revisions), project.revision_limit),
    }
