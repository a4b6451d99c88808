import datetime
from ..extensions import db


class Account(db.Model):
    """Mirror of an identity-provider user; projects and payments hang off it."""

    __tablename__ = "accounts"

    id = db.Column(db.String(64), primary_key=True)  # identity provider `sub`
    email = db.Column(db.String(255), nullable=True)

    # Number of projects created; claimed atomically by the creation gate
    project_count = db.Column(db.Integer, nullable=False, default=0, server_default="0")

    created_at = db.Column(db.DateTime, default=datetime.datetime.utcnow)

    def __repr__(self):
        return f"<Account {self.id}>"
