# tests/conftest.py
import hashlib
import hmac
import json
import time
import datetime

import jwt
import pytest

from revisify import create_app
from revisify.config import TestConfig
from revisify.extensions import db


@pytest.fixture
def app():
    app = create_app(TestConfig)
    with app.app_context():
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


def make_token(sub="acct-1", email="freelancer@example.com", expires_in=3600,
               audience="authenticated", secret=TestConfig.AUTH_JWT_SECRET, **claims):
    payload = {
        "sub": sub,
        "email": email,
        "aud": audience,
        "exp": datetime.datetime.now(datetime.timezone.utc) + datetime.timedelta(seconds=expires_in),
        **claims,
    }
    if sub is None:
        payload.pop("sub")
    if email is None:
        payload.pop("email")
    return jwt.encode(payload, secret, algorithm="HS256")


def auth_headers(sub="acct-1", email="freelancer@example.com", **kwargs):
    return {"Authorization": f"Bearer {make_token(sub=sub, email=email, **kwargs)}"}


@pytest.fixture
def headers():
    return auth_headers()


def sign_webhook(body, secret=TestConfig.PADDLE_WEBHOOK_SECRET, timestamp=None):
    if isinstance(body, dict):
        body = json.dumps(body)
    ts = str(int(time.time()) if timestamp is None else timestamp)
    digest = hmac.new(secret.encode(), f"{ts}:{body}".encode(), hashlib.sha256).hexdigest()
    return body, f"ts={ts};h1={digest}"


def post_webhook(client, event, **kwargs):
    body, signature = sign_webhook(event, **kwargs)
    return client.post(
        "/webhooks/paddle",
        data=body,
        headers={"Paddle-Signature": signature, "Content-Type": "application/json"},
    )


def transaction_completed(account_id="acct-1", txn_id="txn_01", event_id="evt_01",
                          email="freelancer@example.com"):
    return {
        "event_id": event_id,
        "event_type": "transaction.completed",
        "occurred_at": "2026-10-19T10:00:00Z",
        "data": {
            "id": txn_id,
            "status": "completed",
            "customer_id": "ctm_01",
            "custom_data": {"account_id": account_id, "email": email},
        },
    }


def new_project_payload(**overrides):
    payload = {
        "project_name": "Brand refresh",
        "client_name": "Acme Co",
        "scope": "Logo, palette and two social templates.",
        "revision_limit": 3,
        "extra_revision_cost": 50,
    }
    payload.update(overrides)
    return payload
