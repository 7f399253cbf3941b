from __future__ import annotations

import logging

from flask import Flask, jsonify, request

from ..container import Container
from ..core.constants import JWT_TOKEN_HEADER, OTP_SENT_MESSAGE
from ..core.enums import PersonKind
from ..core.exceptions import (
    AlreadyExistsError,
    AuthenticationError,
    AuthorizationError,
    DeliveryError,
    DomainError,
    NotFoundError,
    OtpMismatchError,
    ValidationError,
)
from ..profiles.model import ProfileClaim
from .service import RegistrationRequest

logger = logging.getLogger(__name__)

_STATUS_BY_ERROR = (
    (NotFoundError, 404),
    (AlreadyExistsError, 400),
    (ValidationError, 400),
    (OtpMismatchError, 400),
    (AuthenticationError, 401),
    (AuthorizationError, 403),
    (DeliveryError, 500),
)


def status_for(error: DomainError) -> int:
    for error_type, status in _STATUS_BY_ERROR:
        if isinstance(error, error_type):
            return status
    return 400


def _body() -> dict:
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


def _text(data: dict, key: str) -> str:
    value = data.get(key)
    return value if isinstance(value, str) else ""


def parse_registration(data: dict) -> RegistrationRequest:
    user = data.get("user") or {}
    claims = {}
    for kind in PersonKind:
        part = data.get(kind.value)
        if not isinstance(part, dict):
            continue
        claims[kind] = ProfileClaim(
            kind=kind,
            number=part.get(kind.number_field),
            email=part.get("email"),
            first_name=part.get("firstName"),
            last_name=part.get("lastName"),
        )
    return RegistrationRequest(
        username=_text(user, "username"),
        password=_text(user, "password"),
        claims=claims,
    )


def register(app: Flask, container: Container) -> None:
    service = container.account_service
    cors_origin = app.config.get("CORS_ORIGIN")

    @app.errorhandler(DomainError)
    def handle_domain_error(e: DomainError):
        status = status_for(e)
        if status >= 500:
            logger.error("%s on %s: %s", type(e).__name__, request.path, e)
        return jsonify({"error": str(e)}), status

    @app.after_request
    def add_cors_headers(response):
        if cors_origin:
            response.headers["Access-Control-Allow-Origin"] = cors_origin
            response.headers["Access-Control-Expose-Headers"] = JWT_TOKEN_HEADER
        return response

    @app.route("/user/register", methods=["POST"], endpoint="user_register")
    def register_user():
        result = service.register(parse_registration(_body()))
        payload = result.user.to_public_dict()
        payload["profile"] = result.profile.to_public_dict()
        return jsonify(payload), 200

    @app.route("/user/login", methods=["POST"], endpoint="user_login")
    def login():
        data = _body()
        result = service.login(_text(data, "username"), _text(data, "password"))
        response = jsonify({"message": "login success...."})
        response.headers[JWT_TOKEN_HEADER] = result.token
        return response, 200

    @app.route("/user/forgot-password", methods=["POST"], endpoint="user_forgot_password")
    def forgot_password():
        service.forgot_password(_text(_body(), "username"))
        return jsonify({"message": OTP_SENT_MESSAGE}), 200

    @app.route("/user/verify-forgot-password", methods=["POST"], endpoint="user_verify_forgot_password")
    def verify_forgot_password():
        data = _body()
        user = service.verify_otp_forgot_password(
            _text(data, "username"),
            _text(data, "otp"),
            _text(data, "password"),
        )
        return jsonify(user.to_public_dict()), 200

    @app.route("/user/verify-otp", methods=["POST"], endpoint="user_verify_otp")
    def verify_otp():
        data = _body()
        username = _text(data, "username")
        otp = _text(data, "otp")
        if not username or not otp:
            return jsonify({"error": "Both username and otp are required"}), 400

        if service.verify_otp(username, otp):
            return jsonify({"message": "Account unlocked successfully"}), 200
        return jsonify({"error": "Invalid OTP"}), 401

    @app.route("/user/forgot-username", methods=["POST"], endpoint="user_forgot_username")
    def forgot_username():
        email = _text(_body(), "email")
        if not email:
            return jsonify({"error": "Email is required"}), 400
        service.forgot_username(email)
        return jsonify({"message": OTP_SENT_MESSAGE}), 200

    @app.route("/user/verify-otp-forgot-username", methods=["POST"], endpoint="user_verify_otp_forgot_username")
    def verify_otp_forgot_username():
        data = _body()
        user = service.verify_otp_forgot_username(_text(data, "otp"), _text(data, "username"))
        return jsonify({"message": f"Username: {user.username}"}), 200

    @app.route("/user/list", methods=["GET"], endpoint="user_list")
    def list_users():
        header = request.headers.get("Authorization", "")
        if not header:
            raise AuthenticationError("Missing bearer token")
        claims = container.token_issuer.decode(header)
        if "user:read" not in (claims.get("authorities") or []):
            raise AuthorizationError("You do not have permission to list users")
        return jsonify([u.to_public_dict() for u in service.list_users()]), 200
