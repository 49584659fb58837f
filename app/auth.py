from flask import Blueprint, request
from flask_login import LoginManager, current_user, login_required, login_user, logout_user
from werkzeug.security import check_password_hash, generate_password_hash
from sqlalchemy.exc import SQLAlchemyError
from functools import wraps
from db import db
from models import Profile
from constants import ROLE_ADMIN, ROLE_USER, USER_APP_ROLES
from api_responses import success_response, error_response, handle_action_errors, ErrorCode
from exceptions import NotFoundException, ValidationException
from repositories.apitoken_repository import ApiTokenRepository
from repositories.profile_repository import ProfileRepository, normalize_usertag
from utils import format_datetime, generate_id, now_utc
from settings import load_settings
import secrets
import os
import logging

# Retrieve main logger
logger = logging.getLogger("main")

auth_blueprint = Blueprint("auth", __name__, url_prefix="/api/auth")

login_manager = LoginManager()


@login_manager.user_loader
def load_user(profile_id):
    return db.session.get(Profile, profile_id)


@login_manager.unauthorized_handler
def unauthorized_json():
    return error_response(ErrorCode.AUTH_REQUIRED, status_code=401)


def check_api_token(request):
    """
    Resolve the profile behind an `Authorization: Bearer <token>` header.
    Returns the Profile or None.
    """
    auth_header = request.headers.get("Authorization")
    if not auth_header or not auth_header.startswith("Bearer "):
        return None

    token = ApiTokenRepository().get_by_token(auth_header.split(" ", 1)[1].strip())
    if token is None:
        return None

    try:
        token.last_used = now_utc()
        db.session.commit()
    except SQLAlchemyError as e:
        # A failed timestamp update must not fail the request
        db.session.rollback()
        logger.warning(f"Could not update last_used for token {token.id}: {e}")
    return token.profile


def current_actor():
    """The verified Profile making the request (session first, then API token), or None."""
    if current_user.is_authenticated:
        return current_user._get_current_object()
    return check_api_token(request)


def access_required(access: str):
    def _access_required(f):
        @wraps(f)
        def decorated_view(*args, **kwargs):
            actor = current_actor()
            if actor is None:
                return error_response(ErrorCode.AUTH_REQUIRED, status_code=401)
            if not actor.has_access(access):
                return error_response(ErrorCode.FORBIDDEN, status_code=403)
            return f(*args, **kwargs)

        return decorated_view

    return _access_required


def create_or_update_profile(usertag, password, role=ROLE_USER, name=None):
    """
    Create a profile or update an existing one with the given credentials and role.
    """
    if role not in USER_APP_ROLES:
        raise ValueError(f"Unknown role '{role}'")
    usertag = normalize_usertag(usertag)
    repository = ProfileRepository()
    profile = repository.get_by_usertag(usertag)
    try:
        hashed_pw = generate_password_hash(password, method="pbkdf2:sha256")
        if profile:
            logger.info(f"Updating existing profile {usertag}")
            profile.password = hashed_pw
            profile.role = role
        else:
            logger.info(f"Creating new profile {usertag}")
            profile = repository.create(
                id=generate_id("prof"),
                name=name or usertag.lstrip("@"),
                usertag=usertag,
                password=hashed_pw,
                role=role,
            )
        db.session.commit()
    except SQLAlchemyError as e:
        logger.error(f"Error saving profile {usertag}: {e}")
        db.session.rollback()
        raise
    return profile


def init_user_from_environment(environment_name, admin=False):
    """
    allow to init some user from environment variable to init some users without using the UI
    """
    username = os.getenv(environment_name + "_NAME")
    password = os.getenv(environment_name + "_PASSWORD")
    if username and password:
        if admin:
            logger.info("Initializing an admin profile from environment variable...")
        else:
            logger.info("Initializing a regular profile from environment variable...")
        create_or_update_profile(username, password, ROLE_ADMIN if admin else ROLE_USER)


def init_users(app):
    with app.app_context():
        # init users from ENV
        if os.environ.get("USER_ADMIN_NAME") is not None:
            init_user_from_environment(environment_name="USER_ADMIN", admin=True)
        if os.environ.get("USER_GUEST_NAME") is not None:
            init_user_from_environment(environment_name="USER_GUEST", admin=False)


def _login_rate_limit():
    return load_settings()["auth"]["login_rate_limit"]


@auth_blueprint.route("/login", methods=["POST"])
def login():
    # Import here to avoid circular dependency
    from app import limiter

    @limiter.limit(_login_rate_limit)
    def _rate_limited_login():
        data = request.get_json(silent=True) or {}
        usertag = data.get("usertag")
        password = data.get("password")
        remember = bool(data.get("remember"))

        profile = ProfileRepository().get_by_usertag(usertag) if usertag else None

        # Profiles without a password (seeded ones) can only use API tokens
        if not profile or not profile.password or not check_password_hash(profile.password, password or ""):
            logger.warning(f"Incorrect login for profile {usertag}")
            return error_response(ErrorCode.AUTH_REQUIRED, message="Invalid usertag or password.", status_code=401)

        logger.info(f"Sucessfull login for profile {profile.usertag}")
        login_user(profile, remember=remember)
        return success_response(profile.to_dict())

    return _rate_limited_login()


@auth_blueprint.route("/logout", methods=["POST"])
@login_required
def logout():
    logout_user()
    return success_response()


@auth_blueprint.route("/me", methods=["GET"])
def me():
    actor = current_actor()
    return success_response(actor.to_dict() if actor else None)


@auth_blueprint.route("/change_password", methods=["POST"])
@login_required
@handle_action_errors
def change_password():
    data = request.get_json(silent=True) or {}
    current_password = data.get("currentPassword")
    new_password = data.get("newPassword")

    if not new_password:
        raise ValidationException("newPassword is required.")
    if current_user.password and not check_password_hash(current_user.password, current_password or ""):
        return error_response(ErrorCode.AUTH_REQUIRED, message="Current password is incorrect.", status_code=401)

    current_user.password = generate_password_hash(new_password, method="pbkdf2:sha256")
    db.session.commit()
    logger.info(f"Password changed for profile {current_user.usertag}")
    return success_response()


@auth_blueprint.route("/tokens", methods=["GET"])
@access_required(ROLE_USER)
@handle_action_errors
def list_tokens():
    """API tokens of the calling profile"""
    tokens = ApiTokenRepository().list_for_profile(current_actor().id)
    return success_response(
        [
            {
                "id": t.id,
                "name": t.name,
                "createdAt": format_datetime(t.created_at),
                "lastUsed": format_datetime(t.last_used),
                "prefix": t.token[:8] + "...",
            }
            for t in tokens
        ]
    )


@auth_blueprint.route("/tokens", methods=["POST"])
@access_required(ROLE_USER)
@handle_action_errors
def create_token():
    """Create a new API token; the secret is only returned once"""
    data = request.get_json(silent=True) or {}
    name = (data.get("name") or "").strip()
    if not name:
        raise ValidationException("Name is required.")

    token_str = secrets.token_hex(32)
    new_token = ApiTokenRepository().create(profile_id=current_actor().id, name=name, token=token_str)
    db.session.commit()
    return success_response({"token": token_str, "id": new_token.id, "name": new_token.name}, status_code=201)


@auth_blueprint.route("/tokens/<int:id>", methods=["DELETE"])
@access_required(ROLE_USER)
@handle_action_errors
def delete_token(id):
    """Revoke one of the caller's API tokens"""
    if not ApiTokenRepository().delete(id, current_actor().id):
        raise NotFoundException("Token not found.")
    db.session.commit()
    return success_response()
