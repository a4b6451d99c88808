import datetime

import pytest

from revisify.errors import NotFound
from revisify.extensions import db
from revisify.models import Project, Revision
from revisify.repositories.share_reader import SharedProjectReader
from revisify.services import quota_service
from revisify.services.identity_service import SessionContext
from tests.conftest import new_project_payload

SESSION = SessionContext(account_id="acct-1", email="freelancer@example.com")


@pytest.fixture
def project(app):
    project = quota_service.create_project(SESSION, **new_project_payload(revision_limit=2))
    now = datetime.datetime.utcnow()
    db.session.add(Revision(project_id=project.id, note="later", created_at=now))
    db.session.add(Revision(project_id=project.id, note="earlier", created_at=now - datetime.timedelta(days=1)))
    db.session.commit()
    return project


def test_valid_token_resolves_project_and_ordered_revisions(project):
    view = SharedProjectReader().resolve(project.share_token)

    assert view.project.id == project.id
    assert view.project.project_name == "Brand refresh"
    assert [r.note for r in view.revisions] == ["earlier", "later"]


def test_unknown_token_is_not_found(app):
    with pytest.raises(NotFound) as exc:
        SharedProjectReader().resolve("a" * 24)
    assert exc.value.message == "This link is invalid or has expired."


@pytest.mark.parametrize("token", ["", "short", "has spaces in it!!!!", "x" * 200, None, 12345])
def test_malformed_token_is_not_found(app, token):
    with pytest.raises(NotFound):
        SharedProjectReader().resolve(token)


def test_reader_exposes_no_write_operations():
    public = [name for name in dir(SharedProjectReader) if not name.startswith("_")]
    assert public == ["resolve"]


def test_view_is_immutable(project):
    view = SharedProjectReader().resolve(project.share_token)
    with pytest.raises(AttributeError):
        view.project.revision_limit = 99
    assert isinstance(view.revisions, tuple)


def test_share_endpoint_needs_no_auth(client, project):
    resp = client.get(f"/share/{project.share_token}")

    assert resp.status_code == 200
    data = resp.get_json()["data"]
    assert data["project"]["client_name"] == "Acme Co"
    assert "account_id" not in data["project"]
    assert "extra_revision_cost" not in data["project"]
    assert [r["note"] for r in data["revisions"]] == ["earlier", "later"]
    assert data["scope_status"]["status"] == "Out of Scope"


def test_share_endpoint_invalid_link(client, app):
    resp = client.get("/share/not-a-real-token-value")

    assert resp.status_code == 404
    body = resp.get_json()
    assert body["message"] == "This link is invalid or has expired."


def test_share_endpoint_rejects_writes(client, project):
    resp = client.post(f"/share/{project.share_token}", json={"note": "x"})

    assert resp.status_code == 405
    assert Revision.query.filter_by(project_id=project.id).count() == 2
    assert db.session.get(Project, project.id).revision_limit == 2
