import re

from flask import Blueprint, request, jsonify, current_app, g

from models import db
from models.user import User, Role
from security.csrf import issue_csrf_token
from security.password import hash_password, password_problem, verify_password
from security.rbac import CUSTOMER
from security.session import cookie_name, create_session, revoke_all_sessions, revoke_session
from utils.audit import log_event
from utils.auth_context import login_required

auth_bp = Blueprint("auth", __name__, url_prefix="/auth")

_PHONE_RE = re.compile(r"^\+?[1-9]\d{1,14}$")


def _is_valid_email(email: str) -> bool:
    return isinstance(email, str) and "@" in email and len(email) <= 255


@auth_bp.post("/register")
def register():
    data = request.get_json(silent=True) or {}
    email = (data.get("email") or "").strip().lower()
    password = data.get("password") or ""
    full_name = (data.get("full_name") or "").strip() or None
    phone_number = (data.get("phone_number") or "").strip() or None

    if not _is_valid_email(email):
        return jsonify(error="Invalid email", code="VALIDATION_ERROR"), 400
    problem = password_problem(password)
    if problem:
        return jsonify(error=problem, code="VALIDATION_ERROR"), 400
    if phone_number and not _PHONE_RE.match(phone_number):
        return jsonify(error="Invalid phone number format", code="VALIDATION_ERROR"), 400

    if User.query.filter_by(email=email).first():
        log_event("REGISTER_FAIL_EMAIL_EXISTS", metadata={"email": email})
        return jsonify(error="Email already registered", code="EMAIL_EXISTS"), 409

    user = User(email=email, password_hash=hash_password(password), full_name=full_name, phone_number=phone_number)
    db.session.add(user)
    db.session.flush()

    customer_role = Role.query.filter_by(name=CUSTOMER).first()
    if customer_role:
        user.roles.append(customer_role)

    db.session.commit()
    log_event("REGISTER_SUCCESS", user_id=user.id)

    return jsonify(message="Registered successfully", id=user.id), 201


@auth_bp.post("/login")
def login():
    data = request.get_json(silent=True) or {}
    email = (data.get("email") or "").strip().lower()
    password = data.get("password") or ""

    user = User.query.filter_by(email=email).first()
    if not user or not verify_password(password, user.password_hash):
        log_event("LOGIN_FAIL", user_id=user.id if user else None, metadata={"email": email})
        return jsonify(error="Invalid credentials", code="INVALID_CREDENTIALS"), 401

    # Rotate: revoke any existing sessions for this user
    revoked_count = revoke_all_sessions(user.id)
    raw_token = create_session(user.id)

    resp = jsonify(message="Login OK", roles=[r.name for r in user.roles])
    resp.set_cookie(
        cookie_name(),
        raw_token,
        httponly=True,
        secure=current_app.config.get("SESSION_COOKIE_SECURE", False),
        samesite=current_app.config.get("SESSION_COOKIE_SAMESITE", "Lax"),
        max_age=current_app.config.get("SESSION_LIFETIME_SECONDS", 8 * 60 * 60),
        path="/",
    )
    resp = issue_csrf_token(resp)

    log_event("LOGIN_SUCCESS", user_id=user.id, metadata={"revoked_sessions": revoked_count})
    return resp, 200


@auth_bp.get("/me")
@login_required
def me():
    return jsonify(
        id=g.user.id,
        email=g.user.email,
        roles=[r.name for r in g.user.roles],
        full_name=g.user.full_name,
        phone_number=g.user.phone_number,
    ), 200


@auth_bp.post("/logout")
@login_required
def logout():
    revoke_session(request.cookies.get(cookie_name()))
    log_event("LOGOUT", user_id=g.user.id)

    resp = jsonify(message="Logged out")
    resp.delete_cookie(cookie_name(), path="/")
    return resp, 200
