# Overview: Flask API routes for auth operations; parses input and returns JSON responses.

# backend/runway/routes/auth.py
"""
Authentication API routes

- signup: creates user + organization, returns a token scoped to it
- login: returns a token scoped to the user's first organization
- me: current user, current organization and all memberships
"""

from flask import Blueprint, request, jsonify, current_app, g

from ..services import auth_service
from ..services import session_service
from ..services import tenant_service
from ..services.ledger_store import StoreError, current_store
from ..validation import ConflictError, ValidationError, validate_signup_payload
from ..decorators import require_auth


auth_bp = Blueprint("auth", __name__, url_prefix="/api/v1/auth")


def _session_payload(user, org, token: str) -> dict:
    return {
        "token": token,
        "user": {"id": user.id, "email": user.email},
        "organization": org.to_dict(),
        "organizations": tenant_service.list_user_organizations(user.id),
    }


@auth_bp.post("/signup")
def signup_route():
    """
    Create an account and its first organization.

    409 when the email is already registered.
    """
    try:
        email, password, organization_name = validate_signup_payload(request.get_json(silent=True))
        user, org = auth_service.signup(current_store(), email, password, organization_name)
        token = session_service.issue_token(user.id, org.id)
        return jsonify(_session_payload(user, org, token)), 201

    except ValidationError as e:
        return jsonify(e.to_dict()), 400
    except ConflictError as e:
        return jsonify({"error": str(e)}), 409
    except StoreError:
        current_app.logger.exception("Store failure during signup")
        return jsonify({"error": "Internal server error"}), 500
    except Exception:
        current_app.logger.exception("Failed to sign up user")
        return jsonify({"error": "Internal server error"}), 500


@auth_bp.post("/login")
def login_route():
    """
    Authenticate user and issue a session token.

    Token must be included in Authorization header for protected routes.
    """
    try:
        data = request.get_json(silent=True) or {}
        email = data.get("email")
        password = data.get("password")

        if not isinstance(email, str) or not isinstance(password, str) or not email or not password:
            return jsonify({"error": "email and password required"}), 400

        user = auth_service.authenticate(email, password)
        if not user:
            return jsonify({"error": "Invalid credentials"}), 401

        membership = auth_service.primary_membership(user)
        if membership is None:
            return jsonify({"error": "No organization access"}), 403

        token = session_service.issue_token(user.id, membership.org_id)
        return jsonify(_session_payload(user, membership.organization, token)), 200

    except Exception:
        current_app.logger.exception("Failed to login user")
        return jsonify({"error": "Internal server error"}), 500


@auth_bp.get("/me")
@require_auth
def me_route():
    user = g.current_user
    return jsonify({
        "user": {"id": user.id, "email": user.email},
        "organization": g.session_context.organization.to_dict(),
        "organizations": tenant_service.list_user_organizations(user.id),
    }), 200
