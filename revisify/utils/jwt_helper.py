import json
import logging
import time

import jwt
import requests
from flask import current_app

from ..errors import IdentityUnavailable, Unauthenticated

logger = logging.getLogger(__name__)

# Cache for the identity provider's JWKS (public keys)
JWKS_CACHE = None
JWKS_CACHE_TIMESTAMP = None
JWKS_STALE_LIMIT = 86400  # use a stale copy for up to a day if the provider is down


def get_jwks(auth_url: str, force_refresh: bool = False):
    """Fetch the JWKS document, caching successful fetches only."""
    global JWKS_CACHE, JWKS_CACHE_TIMESTAMP

    ttl = current_app.config.get("JWKS_CACHE_TTL", 3600)
    if JWKS_CACHE and not force_refresh and JWKS_CACHE_TIMESTAMP:
        if time.time() - JWKS_CACHE_TIMESTAMP < ttl:
            return JWKS_CACHE

    jwks_url = f"{auth_url.rstrip('/')}/auth/v1/.well-known/jwks.json"
    try:
        r = requests.get(jwks_url, timeout=10)
        r.raise_for_status()
        jwks = r.json()
    except (requests.RequestException, ValueError) as e:
        logger.warning("JWKS fetch from %s failed: %s", jwks_url, e)
        if JWKS_CACHE and JWKS_CACHE_TIMESTAMP and time.time() - JWKS_CACHE_TIMESTAMP < JWKS_STALE_LIMIT:
            logger.info("Using stale JWKS cache")
            return JWKS_CACHE
        raise IdentityUnavailable()

    JWKS_CACHE = jwks
    JWKS_CACHE_TIMESTAMP = time.time()
    logger.info("Fetched JWKS with %d keys", len(jwks.get("keys", [])))
    return jwks


def _signing_key(kid, algorithm):
    auth_url = current_app.config.get("AUTH_URL")
    if not auth_url:
        logger.error("AUTH_URL is not set; cannot verify %s tokens", algorithm)
        raise Unauthenticated("Unsupported token algorithm")

    for force in (False, True):
        jwks = get_jwks(auth_url, force_refresh=force)
        for key in jwks.get("keys", []):
            if key.get("kid") == kid:
                return jwt.PyJWK.from_json(json.dumps(key), algorithm=algorithm).key
    raise Unauthenticated("Invalid token signature")


def decode_access_token(token: str) -> dict:
    """Verify an identity-provider access token and return its claims.

    HS256 tokens are checked against AUTH_JWT_SECRET; ES256/RS256 tokens against
    the provider's published keys.
    """
    try:
        header = jwt.get_unverified_header(token)
    except jwt.InvalidTokenError:
        raise Unauthenticated("Invalid token header")

    algorithm = header.get("alg")
    if algorithm == "HS256":
        secret = current_app.config.get("AUTH_JWT_SECRET")
        if not secret:
            logger.error("AUTH_JWT_SECRET is not set; cannot verify HS256 tokens")
            raise Unauthenticated("Unsupported token algorithm")
        key = secret
    elif algorithm in ("ES256", "RS256"):
        key = _signing_key(header.get("kid"), algorithm)
    else:
        raise Unauthenticated(f"Unsupported token algorithm: {algorithm}")

    try:
        return jwt.decode(
            token,
            key,
            algorithms=[algorithm],
            audience=current_app.config.get("AUTH_JWT_AUDIENCE", "authenticated"),
            options={"require": ["exp", "sub"]},
        )
    except jwt.ExpiredSignatureError:
        raise Unauthenticated("Token has expired!")
    except jwt.InvalidTokenError:
        raise Unauthenticated("Invalid token!")
