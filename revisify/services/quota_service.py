"""Entitlement and quota gates for projects and revisions."""
import decimal
import logging

from ..errors import InvalidInput, QuotaExceeded, ScopeExceeded
from ..repositories import store
from ..utils.plan_limits import free_project_limit
from .gate_lock import gate_lock

logger = logging.getLogger(__name__)

MAX_NAME_LENGTH = 200
MAX_NOTE_LENGTH = 5000
# Bounded by the store columns (32-bit INTEGER, NUMERIC(10, 2))
MAX_REVISION_LIMIT = 2**31 - 1
MAX_EXTRA_REVISION_COST = decimal.Decimal("99999999.99")


def is_entitled(account_id: str) -> bool:
    return store.count_active_entitlements(account_id) > 0


# ---------------------------------------------------------------------------
# Input validation (runs before any storage call)
# ---------------------------------------------------------------------------
def _required_text(value, field: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise InvalidInput(f"{field} is required")
    value = value.strip()
    if len(value) > MAX_NAME_LENGTH:
        raise InvalidInput(f"{field} must be at most {MAX_NAME_LENGTH} characters")
    return value


def validate_project_fields(project_name, client_name, scope, revision_limit, extra_revision_cost):
    project_name = _required_text(project_name, "project_name")
    client_name = _required_text(client_name, "client_name")

    if scope is None:
        scope = ""
    if not isinstance(scope, str):
        raise InvalidInput("scope must be text")

    # bool is an int subclass; True is not a revision limit
    if isinstance(revision_limit, bool) or not isinstance(revision_limit, int):
        raise InvalidInput("revision_limit must be a whole number")
    if revision_limit < 1:
        raise InvalidInput("revision_limit must be at least 1")
    if revision_limit > MAX_REVISION_LIMIT:
        raise InvalidInput(f"revision_limit must be at most {MAX_REVISION_LIMIT}")

    if extra_revision_cost is None:
        extra_revision_cost = 0
    if isinstance(extra_revision_cost, bool):
        raise InvalidInput("extra_revision_cost must be a number")
    try:
        cost = decimal.Decimal(str(extra_revision_cost))
    except (decimal.InvalidOperation, ValueError):
        raise InvalidInput("extra_revision_cost must be a number")
    if not cost.is_finite() or cost < 0:
        raise InvalidInput("extra_revision_cost cannot be negative")
    if cost > MAX_EXTRA_REVISION_COST:
        raise InvalidInput(f"extra_revision_cost must be at most {MAX_EXTRA_REVISION_COST}")

    return project_name, client_name, scope.strip(), revision_limit, cost.quantize(decimal.Decimal("0.01"))


def validate_note(note) -> str:
    if not isinstance(note, str) or not note.strip():
        raise InvalidInput("note is required")
    note = note.strip()
    if len(note) > MAX_NOTE_LENGTH:
        raise InvalidInput(f"note must be at most {MAX_NOTE_LENGTH} characters")
    return note


# ---------------------------------------------------------------------------
# Project-creation gate
# ---------------------------------------------------------------------------
def create_project(session, project_name, client_name, scope,
                   revision_limit, extra_revision_cost):
    """Create a project for ``session`` if its plan allows another one.

    Free accounts are limited to FREE_PROJECT_LIMIT projects. The count is
    checked before and again right after the account upsert, and the insert
    itself claims the slot atomically.
    """
    fields = validate_project_fields(
        project_name, client_name, scope, revision_limit, extra_revision_cost
    )

    with gate_lock(f"projects:{session.account_id}"):
        entitled = is_entitled(session.account_id)
        quota = None if entitled else free_project_limit()

        if quota is not None and store.count_projects(session.account_id) >= quota:
            logger.info("Project quota reached for account %s", session.account_id)
            raise QuotaExceeded()

        store.upsert_account(session.account_id, session.email)

        if quota is not None and store.count_projects(session.account_id) >= quota:
            logger.info("Project quota reached for account %s on re-check", session.account_id)
            raise QuotaExceeded()

        project = store.insert_project(session.account_id, *fields, quota=quota)

    logger.info("Project %s created for account %s", project.id, session.account_id)
    return project


# ---------------------------------------------------------------------------
# Revision-recording gate
# ---------------------------------------------------------------------------
def record_revision(session, project_id: str, note):
    """Append a revision to one of the caller's projects unless its limit is reached."""
    note = validate_note(note)

    with gate_lock(f"revisions:{project_id}"):
        project = store.get_project(project_id, account_id=session.account_id)
        count = store.count_revisions(project.id)
        if count >= project.revision_limit:
            logger.info("Project %s is out of scope (%d/%d)", project.id, count, project.revision_limit)
            raise ScopeExceeded()

        revision = store.insert_revision(project.id, note)

    logger.info("Revision %s recorded on project %s", revision.id, project_id)
    return revision


def project_detail(session, project_id: str):
    project = store.get_project(project_id, account_id=session.account_id)
    return project, store.list_revisions(project.id)
