import json
import logging

from flask import Blueprint, request, jsonify, current_app

from ..services.webhook_service import verify_webhook_signature, process_webhook_event

logger = logging.getLogger(__name__)

webhook_bp = Blueprint('webhook_bp', __name__)


@webhook_bp.route('/paddle', methods=['POST'])
def paddle_webhook():
    """
    Paddle notification endpoint - NO USER AUTHENTICATION.
    Trust comes from the Paddle-Signature header alone.
    """
    payload_body = request.get_data()

    signature = request.headers.get('Paddle-Signature')
    if not signature:
        logger.warning("Missing Paddle-Signature header")
        return jsonify({'error': 'Missing signature'}), 400

    webhook_secret = current_app.config.get('PADDLE_WEBHOOK_SECRET')
    if not webhook_secret:
        logger.error("PADDLE_WEBHOOK_SECRET not configured")
        return jsonify({'error': 'Webhook not configured'}), 500

    tolerance = current_app.config.get('PADDLE_WEBHOOK_TOLERANCE', 300)
    if not verify_webhook_signature(payload_body, signature, webhook_secret, tolerance=tolerance):
        logger.warning("Invalid webhook signature")
        return jsonify({'error': 'Invalid signature'}), 401

    try:
        event_data = json.loads(payload_body)
    except json.JSONDecodeError:
        return jsonify({'error': 'Invalid JSON'}), 400
    if not isinstance(event_data, dict) or not event_data.get('event_id'):
        return jsonify({'error': 'Invalid event'}), 400

    logger.info("Received webhook event: %s", event_data.get('event_type', 'unknown'))

    # StoreUnavailable propagates as 503 so Paddle redelivers
    success, message = process_webhook_event(event_data, signature)

    # Processing failures are recorded on the event row; acknowledge to stop retries
    return jsonify({'status': 'success' if success else 'error', 'message': message}), 200
