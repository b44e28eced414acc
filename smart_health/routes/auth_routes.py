import logging
import re

from flask import Blueprint, request

from smart_health.extensions import get_services
from smart_health.models.user import ROLE_PATIENT, ROLES, User
from smart_health.services.auth_service import AuthServiceError
from smart_health.utils.request_data import InvalidField, json_body, text_field
from smart_health.utils.response import success, error
from smart_health.web.firebase_guard import firebase_token_required

logger = logging.getLogger(__name__)

auth_bp = Blueprint("auth", __name__, url_prefix="/api/auth")

# =========================
# CONFIG
# =========================
EMAIL_REGEX = r"^[\w\.\+-]+@[\w\.-]+\.\w+$"
MIN_PASSWORD_LENGTH = 6  # Firebase Auth minimum


# =========================
# HELPERS
# =========================
def _register_fields(data: dict) -> dict:
    password = data.get("password")
    if password is not None and not isinstance(password, str):
        raise InvalidField("password")
    return {
        "email": text_field(data, "email", lower=True),
        "password": password or "",
        "role": text_field(data, "role", lower=True) or ROLE_PATIENT,
        "username": text_field(data, "username") or None,
        "gender": text_field(data, "gender") or None,
        "age": data.get("age"),
    }


def _validate_register_input(fields: dict) -> list[str]:
    errors: list[str] = []

    email = fields["email"]
    password = fields["password"]

    if not email:
        errors.append("Email is required.")
    elif not re.match(EMAIL_REGEX, email):
        errors.append("Invalid email format.")

    if not password:
        errors.append("Password is required.")
    elif len(password) < MIN_PASSWORD_LENGTH:
        errors.append(f"Password must be at least {MIN_PASSWORD_LENGTH} characters.")

    if fields["role"] not in ROLES:
        errors.append("Role must be 'patient' or 'doctor'.")

    age = fields["age"]
    if age not in (None, ""):
        try:
            if not 1 <= int(age) <= 150:
                errors.append("Age must be between 1-150 years.")
        except (TypeError, ValueError):
            errors.append("Age must be a number.")

    return errors


# =========================
# ROUTES
# =========================
@auth_bp.route("/register", methods=["POST"])
def register():
    data = json_body()
    if not data:
        return error("No data sent", 400)

    try:
        fields = _register_fields(data)
    except InvalidField as exc:
        return error(str(exc), 400)

    validation_errors = _validate_register_input(fields)
    if validation_errors:
        return error(validation_errors[0], 400)

    email = fields["email"]
    username = fields["username"]
    role = fields["role"]
    age = int(fields["age"]) if fields["age"] not in (None, "") else None

    services = get_services()
    try:
        uid = services.auth.create_user(email, fields["password"], display_name=username)
    except AuthServiceError as exc:
        return error(exc.message, exc.status_code)

    user = User(
        id=uid,
        username=username,
        email=email,
        age=age,
        gender=fields["gender"],
        role=role,
    )
    try:
        services.store.create_user(user)
    except Exception:
        # Do not leave an auth account without its users/{uid} document
        logger.exception("Could not write users/%s, rolling back auth user", uid)
        services.auth.delete_user(uid)
        return error("Registration failed", 500)

    logger.info("Registered %s user %s", role, uid)
    return success(
        {"uid": uid, "email": email, "username": username, "role": role},
        "Registration successful",
        201,
    )


@auth_bp.route("/login", methods=["POST"])
def login():
    data = json_body()
    try:
        email = text_field(data, "email", lower=True)
    except InvalidField as exc:
        return error(str(exc), 400)
    password = data.get("password")
    if not isinstance(password, str):
        password = ""

    if not email or not password:
        return error("Email and password are required", 400)

    services = get_services()
    try:
        session = services.auth.sign_in_with_password(email, password)
    except AuthServiceError as exc:
        return error(exc.message, exc.status_code)

    user = services.store.get_user(session["uid"])
    return success(
        {
            "token": session["idToken"],
            "refresh_token": session["refreshToken"],
            "expires_in": session["expiresIn"],
            "user": user.to_json() if user else {"id": session["uid"], "email": email},
        },
        "Login successful",
    )


@auth_bp.route("/logout", methods=["POST"])
@firebase_token_required()
def logout():
    # Revoking refresh tokens also makes verify_id_token(check_revoked=True) reject current ID tokens
    get_services().auth.revoke_tokens(request.current_uid)
    return success(None, "Logged out")


@auth_bp.route("/me", methods=["GET"])
@firebase_token_required()
def me():
    user = get_services().store.get_user(request.current_uid)
    if not user:
        return error("User not found", 404)
    return success(user.to_json(), "Profile loaded")
