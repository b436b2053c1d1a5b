from functools import wraps
import logging
import uuid
from flask import jsonify
from flask_jwt_extended import verify_jwt_in_request, get_jwt_identity, create_access_token
from mint2story.extensions.extension import db
from mint2story.models.user import User

logger = logging.getLogger(__name__)


def issue_token(user):
    return create_access_token(identity=str(user.id), additional_claims={'email': user.email})


def token_required(f):
    @wraps(f)
    def decorated(*args, **kwargs):
        try:
            # Use Flask-JWT-Extended's built-in verification
            verify_jwt_in_request()

            user_id = get_jwt_identity()
            current_user = db.session.get(User, uuid.UUID(user_id))

            if not current_user:
                return jsonify({'message': 'Invalid token: User not found'}), 401

        except Exception as e:
            logger.info(f"Token verification error: {str(e)}")
            return jsonify({'message': f'Invalid token: {str(e)}'}), 401

        return f(current_user, *args, **kwargs)

    return decorated
