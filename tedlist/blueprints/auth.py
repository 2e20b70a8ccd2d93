"""
Auth blueprint: account creation and bearer-token issue.

POST /api/auth/register   – create an account, returns {token, user}
POST /api/auth/login      – exchange credentials for {token, user}
GET  /api/auth/validate   – resolve the caller's bearer token to {user}
"""
import logging

from flask import Blueprint, jsonify
from flask_login import login_required, current_user

from tedlist.errors import Unauthenticated, ValidationError
from tedlist.extensions import db, limiter
from tedlist.forms import validated
from tedlist.utils.tokens import issue_token

log = logging.getLogger(__name__)
auth_bp = Blueprint("auth", __name__, url_prefix="/api/auth")


@auth_bp.route("/register", methods=["POST"])
@limiter.limit("20 per hour")
def register():
    from tedlist.forms.auth import RegisterForm
    from tedlist.models.user import User

    form  = validated(RegisterForm)
    email = form.email.data.strip().lower()
    if User.query.filter_by(email=email).first():
        raise ValidationError("Email already registered",
                              fields={"email": ["Email already registered."]})

    user = User(name=form.name.data.strip(), email=email, teddies=0)
    user.set_password(form.password.data)
    db.session.add(user)
    db.session.commit()
    log.info("Registered user %s", user.id)

    return jsonify(token=issue_token(user.id), user=user.to_public_dict()), 201


@auth_bp.route("/login", methods=["POST"])
@limiter.limit("10 per minute")
def login():
    from tedlist.forms.auth import LoginForm
    from tedlist.models.user import User

    form = validated(LoginForm)
    user = User.query.filter_by(email=form.email.data.strip().lower()).first()
    if user is None or not user.check_password(form.password.data):
        raise Unauthenticated("Invalid credentials")

    return jsonify(token=issue_token(user.id), user=user.to_public_dict())


@auth_bp.route("/validate")
@login_required
def validate():
    return jsonify(user=current_user.to_public_dict())
