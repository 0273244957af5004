from flask import Blueprint, request, jsonify, current_app, make_response
from flask_jwt_extended import create_access_token, jwt_required, get_jwt_identity, get_jwt
from attendance.models import User, TokenBlocklist
from attendance.extensions import db, limiter
from attendance.schemas import LoginRequest, parse
from attendance.utils.decorators import role_required
from attendance.utils.logging import log_event
from datetime import datetime

auth_bp = Blueprint('auth', __name__)


@auth_bp.route('/login', methods=['POST'])
@limiter.limit("5 per minute", override_defaults=False)
def login():
    data = parse(LoginRequest, request.get_json(silent=True), "Invalid request")
    ip = request.remote_addr

    user = User.query.filter_by(username=data.username).first()

    if user and user.check_password(data.password):
        access_token = create_access_token(
            identity=str(user.id),
            additional_claims={"role": user.role.value}
        )

        response = make_response(jsonify({"user": user.to_dict()}))
        expires = current_app.config["JWT_ACCESS_TOKEN_EXPIRES"]
        response.set_cookie(
            current_app.config.get("JWT_ACCESS_COOKIE_NAME", "access_token_cookie"),
            access_token,
            max_age=int(expires.total_seconds()),
            httponly=True,
            secure=current_app.config["JWT_COOKIE_SECURE"],
            samesite=current_app.config["JWT_COOKIE_SAMESITE"],
            path="/"
        )

        log_event("LOGIN_SUCCESS", user_id=user.id, ip=ip, description=f"{user.username} logged in")
        return response

    log_event("LOGIN_FAILED", ip=ip, description=f"Failed login attempt for {data.username}", level="WARNING")
    return jsonify({"error": "Invalid credentials"}), 401


@auth_bp.route('/me', methods=['GET'])
@jwt_required()
@role_required()
def get_current_user(caller):
    user = db.session.get(User, caller.user_id)
    return jsonify({"user": user.to_dict()}), 200


@auth_bp.route("/logout", methods=["POST"])
@jwt_required()
def logout():
    claims = get_jwt()
    user_id = get_jwt_identity()

    token_block = TokenBlocklist(
        jti=claims["jti"],
        token_type=claims.get("type", "access"),
        user_id=int(user_id),
        expires_at=datetime.fromtimestamp(claims["exp"])
    )
    db.session.add(token_block)
    db.session.commit()

    response = make_response(jsonify({"message": "Logged out successfully"}))
    response.delete_cookie(current_app.config.get("JWT_ACCESS_COOKIE_NAME", "access_token_cookie"), path="/")

    log_event("LOGOUT", user_id=user_id, ip=request.remote_addr)
    return response
