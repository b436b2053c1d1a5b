from flask import Blueprint, request, jsonify, current_app
from http import HTTPStatus
from sqlalchemy.exc import IntegrityError
from google.oauth2 import id_token
from google.auth.transport import requests as google_requests
import logging
import secrets
from mint2story.extensions.extension import db
from mint2story.models.user import User
from mint2story.utils.auth import token_required, issue_token
from mint2story.routes.auth.auth_utils import (
    validate_registration_input,
    validate_login_input,
    handle_errors
)

logger = logging.getLogger(__name__)

auth_bp = Blueprint('auth', __name__, url_prefix='/api/auth')


def _auth_payload(user):
    return {
        'token': issue_token(user),
        'user': {
            'id': str(user.id),
            'email': user.email
        }
    }


@auth_bp.route('/register', methods=['POST'])
@handle_errors
def register():
    data = request.get_json(silent=True)

    valid, message = validate_registration_input(data)
    if not valid:
        return jsonify({'error': message}), HTTPStatus.BAD_REQUEST

    email = data['email'].lower()
    if User.query.filter_by(email=email).first():
        return jsonify({'error': 'Email already registered'}), HTTPStatus.BAD_REQUEST

    user = User(email=email, wallet_address=data.get('wallet_address') or None)
    user.password = data['password']

    try:
        db.session.add(user)
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        return jsonify({'error': 'User already exists or invalid data'}), HTTPStatus.BAD_REQUEST

    return jsonify(_auth_payload(user)), HTTPStatus.CREATED


@auth_bp.route('/login', methods=['POST'])
@handle_errors
def login():
    data = request.get_json(silent=True)

    valid, message = validate_login_input(data)
    if not valid:
        return jsonify({'error': message}), HTTPStatus.BAD_REQUEST

    user = User.query.filter_by(email=data['email'].lower()).first()

    if not user or not user.verify_password(data['password']):
        return jsonify({'error': 'Invalid credentials'}), HTTPStatus.UNAUTHORIZED

    return jsonify(_auth_payload(user)), HTTPStatus.OK


@auth_bp.route('/google', methods=['POST'])
@handle_errors
def google_auth():
    """Sign in with a Google ID token, creating the user on first login"""
    data = request.get_json(silent=True) or {}
    token = data.get('token')
    if not token:
        return jsonify({'error': 'Google token is required'}), HTTPStatus.BAD_REQUEST

    client_id = current_app.config.get('GOOGLE_CLIENT_ID')
    if not client_id:
        logger.error("Google sign-in requested but GOOGLE_CLIENT_ID is not set")
        return jsonify({'error': 'Google sign-in is not configured'}), HTTPStatus.INTERNAL_SERVER_ERROR

    try:
        payload = id_token.verify_oauth2_token(token, google_requests.Request(), client_id)
    except ValueError as e:
        logger.warning(f"Google auth error: {str(e)}")
        return jsonify({'error': 'Google authentication failed'}), HTTPStatus.BAD_REQUEST

    email = payload.get('email') if payload else None
    if not email:
        return jsonify({'error': 'Invalid Google token'}), HTTPStatus.BAD_REQUEST

    email = email.lower()
    user = User.query.filter_by(email=email).first()
    if not user:
        # Google users never log in with a password
        user = User(email=email)
        user.password = secrets.token_urlsafe(16)
        db.session.add(user)
        db.session.commit()

    return jsonify(_auth_payload(user)), HTTPStatus.OK


@auth_bp.route('/me', methods=['GET'])
@token_required
@handle_errors
def me(current_user):
    return jsonify(current_user.to_dict()), HTTPStatus.OK
