# mint2story/routes/auth/auth_utils.py
import re
import logging
from flask import jsonify
from functools import wraps
from mint2story.extensions.extension import db

logger = logging.getLogger(__name__)


def validate_registration_input(data):
    if not isinstance(data, dict) or not all(key in data for key in ('email', 'password')):
        return False, "Missing required fields"

    email = data.get('email') or ''
    if not isinstance(email, str) or not re.match(r'[a-z0-9._%+-]+@[a-z0-9.-]+\.[a-z]{2,}$', email.lower()):
        return False, "Email is not valid"

    password = data.get('password') or ''
    if not isinstance(password, str) or len(password) < 6:
        return False, "Password must be at least 6 characters long"

    wallet_address = data.get('wallet_address')
    if wallet_address is not None and not isinstance(wallet_address, str):
        return False, "Wallet address must be a string"

    return True, None


def validate_login_input(data):
    if not isinstance(data, dict) or not all(key in data for key in ('email', 'password')):
        return False, "Missing required fields"
    if not isinstance(data['email'], str) or not isinstance(data['password'], str):
        return False, "Email and password must be strings"
    return True, None


def handle_errors(f):
    @wraps(f)
    def decorated_function(*args, **kwargs):
        try:
            return f(*args, **kwargs)
        except Exception as e:
            db.session.rollback()
            logger.exception(f"Unhandled error in {f.__name__}")
            return jsonify({"error": str(e)}), 500
    return decorated_function
