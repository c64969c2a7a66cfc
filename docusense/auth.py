"""
Credential service and the bearer-token authentication gate.

Tokens are stateless HS256 JWTs carrying ``user_id`` and ``exp``. The gate is
a Flask-Login request loader, so protected views only need ``@login_required``.
"""

import logging
from datetime import datetime, timezone

import jwt
from flask import current_app, g, jsonify, request

from docusense import bcrypt, db, login_manager
from docusense.errors import AuthenticationError
from docusense.models import User

logger = logging.getLogger(__name__)


# ╔══════════════════════════════════════════════════════════════════════╗
# ║  PASSWORDS                                                         ║
# ╚══════════════════════════════════════════════════════════════════════╝


def hash_password(password: str) -> str:
    return bcrypt.generate_password_hash(password).decode("utf-8")


def check_password(user: User, password: str) -> bool:
    return bcrypt.check_password_hash(user.password_hash, password)


# ╔══════════════════════════════════════════════════════════════════════╗
# ║  TOKENS                                                            ║
# ╚══════════════════════════════════════════════════════════════════════╝


def issue_token(user: User) -> str:
    """Sign a bearer token for ``user`` that expires after TOKEN_EXPIRES."""
    payload = {
        "user_id": user.id,
        "exp": datetime.now(timezone.utc) + current_app.config["TOKEN_EXPIRES"],
    }
    return jwt.encode(payload, current_app.config["SECRET_KEY"], algorithm="HS256")


def decode_token(token: str) -> int:
    """Return the user id embedded in ``token``.

    Raises AuthenticationError for an expired, tampered or malformed token.
    """
    try:
        payload = jwt.decode(
            token,
            current_app.config["SECRET_KEY"],
            algorithms=["HS256"],
            options={"require": ["exp", "user_id"]},
        )
    except jwt.ExpiredSignatureError:
        raise AuthenticationError("Token has expired")
    except jwt.InvalidTokenError as e:
        raise AuthenticationError(f"Invalid token: {e}")

    user_id = payload.get("user_id")
    if not isinstance(user_id, int):
        raise AuthenticationError("Invalid token: missing user id")
    return user_id


def _bearer_token():
    header = request.headers.get("Authorization", "")
    if not header.startswith("Bearer "):
        return None
    return header[len("Bearer "):].strip() or None


# ╔══════════════════════════════════════════════════════════════════════╗
# ║  FLASK-LOGIN HOOKS                                                 ║
# ╚══════════════════════════════════════════════════════════════════════╝


@login_manager.request_loader
def load_user_from_request(req):
    token = _bearer_token()
    if token is None:
        g.auth_error = "No token provided"
        return None

    try:
        user_id = decode_token(token)
    except AuthenticationError as e:
        g.auth_error = e.message
        return None

    user = db.session.get(User, user_id)
    if user is None:
        g.auth_error = "User not found"
        return None
    return user


@login_manager.unauthorized_handler
def unauthorized():
    reason = g.get("auth_error", "Authentication required")
    logger.info(f"Rejected request to {request.path}: {reason}")
    return jsonify({"message": "Authentication failed", "error": reason}), 401
