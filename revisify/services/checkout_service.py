from flask import current_app

from ..errors import StoreUnavailable


def checkout_settings(session) -> dict:
    """Parameters the browser checkout widget needs for the Pro upgrade.

    The account id travels in ``custom_data`` and comes back on the signed
    ``transaction.completed`` notification, which is the only path that grants
    Pro.
    """
    config = current_app.config
    if not config.get("PADDLE_CLIENT_TOKEN") or not config.get("PADDLE_PRICE_ID"):
        current_app.logger.error("Paddle checkout is not configured")
        raise StoreUnavailable("Checkout is not available right now.")

    settings = {
        "environment": "production" if config.get("PADDLE_ENV") == "production" else "sandbox",
        "client_token": config["PADDLE_CLIENT_TOKEN"],
        "items": [{"price_id": config["PADDLE_PRICE_ID"], "quantity": 1}],
        "custom_data": {"account_id": session.account_id, "email": session.email},
        "success_url": f"{config.get('BASE_URL', '').rstrip('/')}/dashboard?upgraded=true",
    }
    if session.email:
        settings["customer"] = {"email": session.email}
    return settings
