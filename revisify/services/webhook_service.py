import hmac
import hashlib
import json
import datetime
import logging
import time

from sqlalchemy.exc import IntegrityError

from ..extensions import db
from ..models.webhook_events import WebhookEvent
from ..repositories import store
from ..repositories.store import store_call

logger = logging.getLogger(__name__)


def parse_signature_header(header: str) -> tuple[str | None, list[str]]:
    """Split a ``Paddle-Signature`` header (``ts=...;h1=...``) into its parts."""
    timestamp = None
    signatures = []
    for part in (header or "").split(";"):
        key, _, value = part.strip().partition("=")
        if key == "ts":
            timestamp = value
        elif key == "h1" and value:
            signatures.append(value)
    return timestamp, signatures


def verify_webhook_signature(payload_body, signature_header, secret, tolerance=300, now=None):
    """
    Verify a Paddle webhook signature.

    Args:
        payload_body: Raw request body as bytes or string
        signature_header: Paddle-Signature header value
        secret: Notification destination secret key
        tolerance: Maximum accepted age of the signed timestamp, in seconds

    Returns:
        bool: True if signature is valid and fresh, False otherwise
    """
    timestamp, signatures = parse_signature_header(signature_header)
    if not timestamp or not signatures:
        return False

    try:
        ts = int(timestamp)
    except ValueError:
        return False

    now = time.time() if now is None else now
    if tolerance and abs(now - ts) > tolerance:
        logger.warning("Webhook signature timestamp outside tolerance")
        return False

    if isinstance(payload_body, str):
        payload_body = payload_body.encode('utf-8')

    expected_signature = hmac.new(
        secret.encode('utf-8'),
        timestamp.encode('utf-8') + b":" + payload_body,
        hashlib.sha256
    ).hexdigest()

    return any(hmac.compare_digest(expected_signature, sig) for sig in signatures)


def _custom_data(event_data):
    data = event_data.get('data') or {}
    custom = data.get('custom_data') or {}
    return custom if isinstance(custom, dict) else {}


def store_webhook_event(event_data, signature):
    """
    Store a webhook event for idempotency and audit.

    Returns:
        WebhookEvent: the event to process, or None when it was already processed
    """
    event_id = event_data.get('event_id')
    if not event_id:
        raise ValueError("Webhook payload has no event_id")

    with store_call("store_webhook_event"):
        existing_event = WebhookEvent.query.filter_by(event_id=event_id).first()
        if existing_event:
            if existing_event.processed:
                logger.info("Webhook event %s already processed, skipping", event_id)
                return None
            # Stored on an earlier delivery whose processing failed
            return existing_event

        data = event_data.get('data') or {}
        webhook_event = WebhookEvent(
            event_id=event_id,
            event_type=event_data.get('event_type', 'unknown'),
            payload=json.dumps(event_data),
            signature=signature,
            processed=False,
            transaction_id=data.get('id') if str(data.get('id', '')).startswith('txn_') else None,
            account_id=_custom_data(event_data).get('account_id'),
            created_at=datetime.datetime.utcnow()
        )
        db.session.add(webhook_event)
        try:
            db.session.commit()
        except IntegrityError:
            # A concurrent delivery of the same event got there first
            db.session.rollback()
            return None

    logger.info("Stored webhook event %s - %s", event_id, webhook_event.event_type)
    return webhook_event


def _mark_processed(webhook_event, error_message=None):
    with store_call("mark_webhook_processed"):
        webhook_event.processed = error_message is None
        webhook_event.processed_at = datetime.datetime.utcnow() if error_message is None else None
        webhook_event.error_message = error_message
        db.session.commit()


def process_transaction_completed(event_data, webhook_event):
    """transaction.completed - grant Pro to the account that checked out."""
    data = event_data.get('data') or {}
    transaction_id = data.get('id')
    custom = _custom_data(event_data)
    account_id = custom.get('account_id')

    if not transaction_id or not account_id:
        _mark_processed(webhook_event, "transaction.completed without transaction id or account_id")
        return False

    store.upsert_account(account_id, custom.get('email'))
    payment, created = store.insert_entitlement(account_id, transaction_id)
    if created:
        logger.info("Pro activated for account %s (transaction %s)", account_id, transaction_id)
    else:
        logger.info("Transaction %s already recorded as payment %s", transaction_id, payment.id)

    _mark_processed(webhook_event)
    return True


def process_subscription_canceled(event_data, webhook_event):
    """subscription.canceled - drop the account back to the free tier."""
    account_id = _custom_data(event_data).get('account_id')
    if not account_id:
        _mark_processed(webhook_event, "subscription.canceled without account_id")
        return False

    count = store.deactivate_entitlements(account_id)
    logger.info("Deactivated %d entitlement(s) for account %s", count, account_id)
    _mark_processed(webhook_event)
    return True


EVENT_HANDLERS = {
    'transaction.completed': process_transaction_completed,
    'subscription.canceled': process_subscription_canceled,
}


def process_webhook_event(event_data, signature):
    """
    Main webhook processing function.

    Infrastructure failures (StoreUnavailable) propagate so the provider retries
    the delivery; everything else is recorded on the event row.

    Returns:
        tuple: (success: bool, message: str)
    """
    webhook_event = store_webhook_event(event_data, signature)
    if not webhook_event:
        return True, "Duplicate event, already processed"

    event_type = event_data.get('event_type', '')
    handler = EVENT_HANDLERS.get(event_type)
    if handler is None:
        logger.info("Event type %s ignored (marking processed)", event_type)
        _mark_processed(webhook_event)
        return True, f"Event {event_type} ignored"

    if handler(event_data, webhook_event):
        return True, f"Event {event_type} processed successfully"
    logger.warning("Webhook event %s could not be processed: %s",
                   webhook_event.event_id, webhook_event.error_message)
    return False, f"Failed to process event {event_type}"
