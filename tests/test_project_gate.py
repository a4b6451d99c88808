from unittest import mock

import pytest

from revisify.errors import InvalidInput, QuotaExceeded
from revisify.extensions import db
from revisify.models import Account, Payment, Project
from revisify.repositories import store
from revisify.services import quota_service
from revisify.services.identity_service import SessionContext
from tests.conftest import auth_headers, new_project_payload

SESSION = SessionContext(account_id="acct-1", email="freelancer@example.com")


def _create(session=SESSION, **overrides):
    payload = new_project_payload(**overrides)
    return quota_service.create_project(session, **payload)


def _grant_pro(account_id="acct-1", ref="txn_pro"):
    store.upsert_account(account_id, "freelancer@example.com")
    store.insert_entitlement(account_id, ref)


def test_free_account_creates_first_project(app):
    project = _create()

    assert project.id
    assert project.account_id == "acct-1"
    assert project.revision_limit == 3
    assert project.share_token
    assert store.count_projects("acct-1") == 1
    assert db.session.get(Account, "acct-1").project_count == 1


def test_second_project_on_free_tier_is_refused(app):
    _create()

    with pytest.raises(QuotaExceeded):
        _create(project_name="Second")

    assert store.count_projects("acct-1") == 1


def test_entitled_account_bypasses_project_count(app):
    _grant_pro()
    for i in range(5):
        _create(project_name=f"Project {i}")

    assert store.count_projects("acct-1") == 5


def test_entitled_account_skips_count_queries(app):
    _grant_pro()
    with mock.patch.object(store, "count_projects", side_effect=AssertionError("counted")):
        _create()


def test_inactive_entitlement_does_not_count(app):
    _grant_pro()
    store.deactivate_entitlements("acct-1")
    _create()

    with pytest.raises(QuotaExceeded):
        _create(project_name="Second")


def test_quota_is_per_account(app):
    _create()
    other = SessionContext(account_id="acct-2", email="other@example.com")
    _create(session=other)

    assert store.count_projects("acct-2") == 1


def test_account_row_is_upserted_before_insert(app):
    assert db.session.get(Account, "acct-1") is None
    _create()
    account = db.session.get(Account, "acct-1")
    assert account.email == "freelancer@example.com"


def test_zero_revision_limit_rejected_before_any_storage_call(app):
    with mock.patch.object(store, "count_active_entitlements") as entitlements, \
            mock.patch.object(store, "count_projects") as count, \
            mock.patch.object(store, "upsert_account") as upsert, \
            mock.patch.object(store, "insert_project") as insert:
        with pytest.raises(InvalidInput):
            _create(revision_limit=0)

    for call in (entitlements, count, upsert, insert):
        call.assert_not_called()


@pytest.mark.parametrize("field,value", [
    ("revision_limit", -2),
    ("revision_limit", "3"),
    ("revision_limit", 2.5),
    ("revision_limit", True),
    ("revision_limit", None),
    ("revision_limit", 2**31),
    ("revision_limit", 2**63),
    ("extra_revision_cost", -1),
    ("extra_revision_cost", "abc"),
    ("extra_revision_cost", "NaN"),
    ("extra_revision_cost", "100000000"),
    ("extra_revision_cost", "1e30"),
    ("project_name", "   "),
    ("client_name", None),
])
def test_invalid_fields_are_rejected(app, field, value):
    with pytest.raises(InvalidInput):
        _create(**{field: value})
    assert Project.query.count() == 0


def test_fields_are_trimmed_and_cost_rounded(app):
    project = _create(project_name="  Site  ", client_name=" Bob ", extra_revision_cost="19.999")
    assert project.project_name == "Site"
    assert project.client_name == "Bob"
    assert str(project.extra_revision_cost) == "20.00"


def test_stale_count_still_cannot_exceed_free_quota(app):
    # Both count checks pass (as for two racing requests); the conditional
    # counter update still refuses the second insert.
    _create()
    with mock.patch.object(store, "count_projects", return_value=0):
        with pytest.raises(QuotaExceeded):
            _create(project_name="Racing")

    assert Project.query.count() == 1


def test_quota_is_rechecked_after_account_upsert(app):
    # A concurrent create lands between the first count and the upsert
    with mock.patch.object(store, "count_projects", side_effect=[0, 1]), \
            mock.patch.object(store, "insert_project") as insert_project:
        with pytest.raises(QuotaExceeded):
            _create()

    insert_project.assert_not_called()


def test_largest_revision_limit_is_accepted(app):
    project = _create(revision_limit=quota_service.MAX_REVISION_LIMIT, extra_revision_cost="99999999.99")
    assert project.revision_limit == quota_service.MAX_REVISION_LIMIT


def test_insert_project_claims_slot_atomically(app):
    store.upsert_account("acct-9", "x@example.com")
    store.insert_project("acct-9", "A", "C", "", 2, 0, quota=1)

    with pytest.raises(QuotaExceeded):
        store.insert_project("acct-9", "B", "C", "", 2, 0, quota=1)

    assert store.count_projects("acct-9") == 1


def test_upsert_account_is_idempotent(app):
    store.upsert_account("acct-1", "freelancer@example.com")
    store.upsert_account("acct-1", "freelancer@example.com")

    assert Account.query.filter_by(id="acct-1").count() == 1


def test_upsert_account_updates_email(app):
    store.upsert_account("acct-1", "old@example.com")
    store.upsert_account("acct-1", "new@example.com")

    assert db.session.get(Account, "acct-1").email == "new@example.com"


# ---------------------------------------------------------------------------
# HTTP surface
# ---------------------------------------------------------------------------
def test_create_project_endpoint(client):
    resp = client.post("/projects", json=new_project_payload(), headers=auth_headers())

    assert resp.status_code == 201
    body = resp.get_json()
    assert body["success"] is True
    assert body["data"]["project_name"] == "Brand refresh"
    assert body["data"]["scope_status"]["status"] == "Within Scope"
    assert body["data"]["extra_revision_cost"] == "50.00"


def test_create_project_endpoint_quota_exceeded(client):
    client.post("/projects", json=new_project_payload(), headers=auth_headers())
    resp = client.post("/projects", json=new_project_payload(), headers=auth_headers())

    assert resp.status_code == 403
    body = resp.get_json()
    assert body["success"] is False
    assert body["error"] == "QUOTA_EXCEEDED"


def test_create_project_endpoint_invalid_input(client):
    resp = client.post("/projects", json=new_project_payload(revision_limit=0), headers=auth_headers())

    assert resp.status_code == 400
    assert resp.get_json()["error"] == "INVALID_INPUT"


def test_create_project_endpoint_oversized_limit(client):
    resp = client.post("/projects", json=new_project_payload(revision_limit=2**63), headers=auth_headers())

    assert resp.status_code == 400
    assert resp.get_json()["error"] == "INVALID_INPUT"
    assert Project.query.count() == 0


def test_create_project_requires_authentication(client):
    resp = client.post("/projects", json=new_project_payload())

    assert resp.status_code == 401
    assert resp.get_json()["error"] == "UNAUTHENTICATED"


def test_list_projects_only_returns_own(client):
    client.post("/projects", json=new_project_payload(), headers=auth_headers())
    client.post("/projects", json=new_project_payload(project_name="Theirs"),
                headers=auth_headers(sub="acct-2", email="other@example.com"))

    resp = client.get("/projects", headers=auth_headers())
    projects = resp.get_json()["data"]["projects"]
    assert [p["project_name"] for p in projects] == ["Brand refresh"]


def test_store_call_rolls_back_on_unexpected_error(app):
    with mock.patch.object(db.session, "rollback", wraps=db.session.rollback) as rollback:
        with pytest.raises(OverflowError):
            with store.store_call("insert_project"):
                raise OverflowError("int too large")

    rollback.assert_called_once()


def test_store_outage_is_reported_as_unavailable(client):
    from sqlalchemy.exc import OperationalError

    with mock.patch.object(Payment, "query") as query:
        query.filter_by.side_effect = OperationalError("SELECT", {}, Exception("down"))
        resp = client.post("/projects", json=new_project_payload(), headers=auth_headers())

    assert resp.status_code == 503
    assert resp.get_json()["error"] == "STORE_UNAVAILABLE"
