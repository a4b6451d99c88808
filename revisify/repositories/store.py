"""Persistent store operations used by the gates.

Every function commits its own unit of work. Infrastructure failures are
rolled back and surfaced as ``StoreUnavailable``.
"""
import datetime
import logging
from contextlib import contextmanager

from sqlalchemy import func, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from ..errors import NotFound, QuotaExceeded, ScopeExceeded, StoreUnavailable
from ..extensions import db
from ..models.account import Account
from ..models.payment import Payment
from ..models.project import Project
from ..models.revision import Revision
from ..models.waitlist import WaitlistEntry

logger = logging.getLogger(__name__)


@contextmanager
def store_call(operation: str):
    try:
        yield
    except IntegrityError:
        db.session.rollback()
        raise
    except SQLAlchemyError as exc:
        db.session.rollback()
        logger.exception("Store operation %s failed", operation)
        raise StoreUnavailable() from exc
    except Exception:
        db.session.rollback()
        raise


# ---------------------------------------------------------------------------
# Accounts
# ---------------------------------------------------------------------------
def upsert_account(account_id: str, email: str | None) -> Account:
    with store_call("upsert_account"):
        account = db.session.get(Account, account_id)
        if account is None:
            account = Account(id=account_id, email=email, project_count=0)
            db.session.add(account)
        elif email and account.email != email:
            account.email = email
        else:
            return account

        try:
            db.session.commit()
        except IntegrityError:
            # Created by a concurrent request between the get and the commit
            db.session.rollback()
            account = db.session.get(Account, account_id)
            if account is None:
                raise
        return account


# ---------------------------------------------------------------------------
# Projects
# ---------------------------------------------------------------------------
def count_projects(account_id: str) -> int:
    with store_call("count_projects"):
        return Project.query.filter_by(account_id=account_id).count()


def list_projects(account_id: str) -> list[Project]:
    with store_call("list_projects"):
        return (
            Project.query.filter_by(account_id=account_id)
            .order_by(Project.created_at.desc())
            .all()
        )


def insert_project(account_id, project_name, client_name, scope,
                   revision_limit, extra_revision_cost, quota=None) -> Project:
    """Insert a project, claiming a slot on the account's project counter.

    With ``quota`` set the claim is a conditional update that only succeeds
    while ``project_count < quota``; losing it raises ``QuotaExceeded`` and
    nothing is inserted.
    """
    with store_call("insert_project"):
        stmt = update(Account).where(Account.id == account_id)
        if quota is not None:
            stmt = stmt.where(Account.project_count < quota)
        stmt = stmt.values(project_count=Account.project_count + 1)
        result = db.session.execute(stmt.execution_options(synchronize_session=False))
        if result.rowcount != 1:
            db.session.rollback()
            raise QuotaExceeded()

        project = Project(
            account_id=account_id,
            project_name=project_name,
            client_name=client_name,
            scope=scope,
            revision_limit=revision_limit,
            extra_revision_cost=extra_revision_cost,
            revision_count=0,
        )
        db.session.add(project)
        db.session.commit()
        return project


def get_project(project_id: str, account_id: str | None = None) -> Project:
    """Load a project; when ``account_id`` is given, other owners' rows are invisible."""
    with store_call("get_project"):
        query = Project.query.filter_by(id=project_id)
        if account_id is not None:
            query = query.filter_by(account_id=account_id)
        project = query.first()
    if project is None:
        raise NotFound("Project not found")
    return project


# ---------------------------------------------------------------------------
# Revisions
# ---------------------------------------------------------------------------
def count_revisions(project_id: str) -> int:
    with store_call("count_revisions"):
        return Revision.query.filter_by(project_id=project_id).count()


def insert_revision(project_id: str, note: str) -> Revision:
    """Append a revision if the project still has a free slot.

    The slot is claimed with a compare-and-swap on ``revision_count`` in the
    same transaction as the insert.
    """
    with store_call("insert_revision"):
        result = db.session.execute(
            update(Project)
            .where(Project.id == project_id)
            .where(Project.revision_count < Project.revision_limit)
            .values(revision_count=Project.revision_count + 1)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            db.session.rollback()
            raise ScopeExceeded()

        revision = Revision(
            project_id=project_id,
            note=note,
            created_at=datetime.datetime.utcnow(),
        )
        db.session.add(revision)
        db.session.commit()
        return revision


def list_revisions(project_id: str) -> list[Revision]:
    with store_call("list_revisions"):
        return (
            Revision.query.filter_by(project_id=project_id)
            .order_by(Revision.created_at.asc(), Revision.id.asc())
            .all()
        )


# ---------------------------------------------------------------------------
# Entitlements
# ---------------------------------------------------------------------------
def count_active_entitlements(account_id: str) -> int:
    with store_call("count_active_entitlements"):
        return Payment.query.filter_by(account_id=account_id, is_active=True).count()


def insert_entitlement(account_id: str, provider_ref: str) -> tuple[Payment, bool]:
    """Record a confirmed payment. Returns (payment, created); repeats are no-ops."""
    with store_call("insert_entitlement"):
        existing = Payment.query.filter_by(provider_ref=provider_ref).first()
        if existing:
            return existing, False

        payment = Payment(account_id=account_id, provider_ref=provider_ref, is_active=True)
        db.session.add(payment)
        try:
            db.session.commit()
        except IntegrityError:
            db.session.rollback()
            existing = Payment.query.filter_by(provider_ref=provider_ref).first()
            if existing is None:
                raise
            return existing, False
        return payment, True


def deactivate_entitlements(account_id: str) -> int:
    with store_call("deactivate_entitlements"):
        result = db.session.execute(
            update(Payment)
            .where(Payment.account_id == account_id, Payment.is_active.is_(True))
            .values(is_active=False, updated_at=datetime.datetime.utcnow())
            .execution_options(synchronize_session=False)
        )
        db.session.commit()
        return result.rowcount


# ---------------------------------------------------------------------------
# Waitlist
# ---------------------------------------------------------------------------
def add_to_waitlist(email: str) -> bool:
    """Returns False when the address was already on the list."""
    with store_call("add_to_waitlist"):
        if db.session.query(func.count(WaitlistEntry.id)).filter_by(email=email).scalar():
            return False
        db.session.add(WaitlistEntry(email=email))
        try:
            db.session.commit()
        except IntegrityError:
            db.session.rollback()
            return False
        return True
