import secrets
from flask import request, jsonify, current_app

def _names():
    cfg = current_app.config
    return cfg.get("CSRF_COOKIE_NAME", "csrf_token"), cfg.get("CSRF_HEADER_NAME", "X-CSRF-Token")

def issue_csrf_token(resp):
    cookie_name, _ = _names()
    resp.set_cookie(
        cookie_name,
        secrets.token_urlsafe(32),
        httponly=False,  # the frontend echoes it back in a header
        secure=current_app.config.get("SESSION_COOKIE_SECURE", False),
        samesite=current_app.config.get("SESSION_COOKIE_SAMESITE", "Lax"),
        path="/",
    )
    return resp

def require_csrf():
    """Double-submit check. Returns an error response, or None when the token matches."""
    cookie_name, header_name = _names()
    cookie_token = request.cookies.get(cookie_name) or ""
    header_token = request.headers.get(header_name) or ""
    if not cookie_token or not header_token or not secrets.compare_digest(cookie_token, header_token):
        return jsonify(error="CSRF validation failed", code="CSRF_FAILED"), 403
    return None
