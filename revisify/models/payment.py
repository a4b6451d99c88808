import datetime
import uuid
from ..extensions import db


class Payment(db.Model):
    """Entitlement record. One active row makes the account Pro."""

    __tablename__ = "payments"

    id = db.Column(db.String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    account_id = db.Column(db.String(64), db.ForeignKey("accounts.id"), nullable=False, index=True)
    provider_ref = db.Column(db.String(255), unique=True, nullable=False)  # Paddle transaction id
    is_active = db.Column(db.Boolean, default=True, nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.datetime.utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, nullable=True)

    def __repr__(self):
        return f"<Payment {self.provider_ref} - Account {self.account_id}>"
