import datetime
import secrets
import uuid
from ..extensions import db


def _new_share_token():
    return secrets.token_urlsafe(18)


class Project(db.Model):
    __tablename__ = "projects"

    id = db.Column(db.String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    account_id = db.Column(db.String(64), db.ForeignKey("accounts.id"), nullable=False, index=True)

    project_name = db.Column(db.String(200), nullable=False)
    client_name = db.Column(db.String(200), nullable=False)
    scope = db.Column(db.Text, nullable=False, default="")

    revision_limit = db.Column(db.Integer, nullable=False)
    extra_revision_cost = db.Column(db.Numeric(10, 2), nullable=False, default=0)

    share_token = db.Column(db.String(64), unique=True, nullable=False, index=True, default=_new_share_token)

    # Revisions logged so far; the revision gate claims slots with a conditional update
    revision_count = db.Column(db.Integer, nullable=False, default=0, server_default="0")

    created_at = db.Column(db.DateTime, default=datetime.datetime.utcnow, nullable=False)

    account = db.relationship("Account", backref=db.backref("projects", lazy=True))

    __table_args__ = (
        db.CheckConstraint("revision_limit >= 1", name="ck_projects_revision_limit"),
        db.CheckConstraint("revision_count <= revision_limit", name="ck_projects_revision_count"),
        db.CheckConstraint("extra_revision_cost >= 0", name="ck_projects_extra_cost"),
    )

    def __repr__(self):
        return f"<Project {self.project_name} ({self.id})>"
