import datetime
import uuid
from ..extensions import db


class WebhookEvent(db.Model):
    __tablename__ = 'webhook_events'

    id = db.Column(db.String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    event_id = db.Column(db.String(255), unique=True, nullable=False, index=True)  # Paddle event ID for idempotency
    event_type = db.Column(db.String(100), nullable=False, index=True)  # e.g. transaction.completed
    payload = db.Column(db.Text, nullable=False)
    signature = db.Column(db.String(512), nullable=True)
    processed = db.Column(db.Boolean, default=False, nullable=False, index=True)
    created_at = db.Column(db.DateTime, default=datetime.datetime.utcnow, nullable=False)
    processed_at = db.Column(db.DateTime, nullable=True)
    error_message = db.Column(db.Text, nullable=True)

    transaction_id = db.Column(db.String(255), nullable=True, index=True)
    account_id = db.Column(db.String(64), nullable=True, index=True)

    def __repr__(self):
        return f"<WebhookEvent {self.event_id} - {self.event_type}>"
