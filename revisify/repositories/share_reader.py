"""Anonymous, read-only access to a project through its share token.

``SharedProjectReader`` only ever issues SELECTs and exposes nothing but
``resolve``; anonymous callers are handed this object, never the store module.
"""
import logging
import re
from dataclasses import dataclass

from sqlalchemy import select

from ..errors import NotFound
from ..extensions import db
from ..models.project import Project
from ..models.revision import Revision
from .store import store_call

logger = logging.getLogger(__name__)

SHARE_TOKEN_RE = re.compile(r"^[A-Za-z0-9_-]{16,64}$")

INVALID_LINK_MESSAGE = "This link is invalid or has expired."


@dataclass(frozen=True)
class SharedRevision:
    id: int
    note: str
    created_at: object


@dataclass(frozen=True)
class SharedProject:
    id: str
    project_name: str
    client_name: str
    scope: str
    revision_limit: int
    created_at: object


@dataclass(frozen=True)
class SharedProjectView:
    project: SharedProject
    revisions: tuple


class SharedProjectReader:
    __slots__ = ()

    def resolve(self, token) -> SharedProjectView:
        if not isinstance(token, str) or not SHARE_TOKEN_RE.match(token):
            raise NotFound(INVALID_LINK_MESSAGE)

        with store_call("resolve_share_token"):
            row = db.session.execute(
                select(
                    Project.id,
                    Project.project_name,
                    Project.client_name,
                    Project.scope,
                    Project.revision_limit,
                    Project.created_at,
                ).where(Project.share_token == token)
            ).first()
            if row is None:
                logger.info("Share token did not resolve")
                raise NotFound(INVALID_LINK_MESSAGE)

            revisions = db.session.execute(
                select(Revision.id, Revision.note, Revision.created_at)
                .where(Revision.project_id == row.id)
                .order_by(Revision.created_at.asc(), Revision.id.asc())
            ).all()

        return SharedProjectView(
            project=SharedProject(*row),
            revisions=tuple(SharedRevision(*r) for r in revisions),
        )
