from flask import Blueprint, current_app, jsonify, request

from docusense import db
from docusense.auth import check_password, hash_password, issue_token
from docusense.errors import ValidationError
from docusense.models import User

auth_bp = Blueprint("auth", __name__, url_prefix="/api/auth")


def _credentials(*fields) -> dict:
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise ValidationError("Invalid request.")

    values = {}
    for field in fields:
        value = data.get(field)
        if not isinstance(value, str) or not value.strip():
            raise ValidationError(f"{field} is required")
        values[field] = value.strip() if field != "password" else value
    return values


# ╔══════════════════════════════════════════════════════════════════════╗
# ║  SIGNUP                                                            ║
# ╚══════════════════════════════════════════════════════════════════════╝

@auth_bp.route("/signup", methods=["POST"])
def signup():
    data = _credentials("username", "email", "password")
    email = data["email"].lower()

    if User.query.filter_by(email=email).first():
        raise ValidationError("User already exists")

    user = User(
        username=data["username"],
        email=email,
        password_hash=hash_password(data["password"]),
    )
    db.session.add(user)
    db.session.commit()
    current_app.logger.info(f"Registered user {user.id}")

    return jsonify({"token": issue_token(user)}), 201


# ╔══════════════════════════════════════════════════════════════════════╗
# ║  LOGIN                                                             ║
# ╚══════════════════════════════════════════════════════════════════════╝

@auth_bp.route("/login", methods=["POST"])
def login():
    data = _credentials("email", "password")

    user = User.query.filter_by(email=data["email"].lower()).first()
    if user is None or not check_password(user, data["password"]):
        raise ValidationError("Invalid credentials")

    return jsonify({"token": issue_token(user)})
