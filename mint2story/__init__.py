from flask import Flask, jsonify
from flask_migrate import Migrate
from flask_cors import CORS
from http import HTTPStatus
from werkzeug.exceptions import MethodNotAllowed, NotFound, InternalServerError
from mint2story.extensions.extension import jwt, db

# Initialize migrate with the imported db
migrate = Migrate()


def _register_error_handlers(app):
    @app.errorhandler(MethodNotAllowed)
    def method_not_allowed(e):
        allowed = sorted(e.valid_methods or [])
        # OPTIONS and HEAD are added to every rule automatically
        declared = [m for m in allowed if m not in ('OPTIONS', 'HEAD')]
        response = jsonify({
            'success': False,
            'error': {
                'code': 'METHOD_NOT_ALLOWED',
                'message': f"Only {', '.join(declared)} is allowed" if declared else 'Method not allowed'
            }
        })
        response.status_code = HTTPStatus.METHOD_NOT_ALLOWED
        response.headers['Allow'] = ', '.join(allowed)
        return response

    @app.errorhandler(NotFound)
    def not_found(e):
        return jsonify({
            'success': False,
            'error': {'code': 'NOT_FOUND', 'message': 'Resource not found'}
        }), HTTPStatus.NOT_FOUND

    @app.errorhandler(InternalServerError)
    def internal_error(e):
        original = getattr(e, 'original_exception', None)
        return jsonify({
            'success': False,
            'error': {
                'code': 'INTERNAL_SERVER_ERROR',
                'message': str(original) if original else 'Unknown error'
            }
        }), HTTPStatus.INTERNAL_SERVER_ERROR


def create_app(config_name='default'):
    from mint2story.config import config_by_name

    # Initialize app
    app = Flask(__name__)
    CORS(app)

    app.config.from_object(config_by_name[config_name])
    if not app.config.get('JWT_SECRET_KEY'):
        raise RuntimeError('Missing required environment variable: JWT_SECRET')

    # Initialize extensions with app
    db.init_app(app)
    jwt.init_app(app)
    migrate.init_app(app, db)

    _register_error_handlers(app)

    # Register blueprints
    from mint2story.routes.auth.auth import auth_bp
    from mint2story.routes.assets.assets import assets_bp
    from mint2story.routes.licenses.licenses import licenses_bp
    from mint2story.routes.story.story import story_bp

    app.register_blueprint(auth_bp)
    app.register_blueprint(assets_bp)
    app.register_blueprint(licenses_bp)
    app.register_blueprint(story_bp)

    @app.route('/')
    def index():
        return "Mint2Story Backend is running!"

    from mint2story.models.user import User
    from mint2story.models.asset import Asset
    from mint2story.models.license import License

    # Create database tables
    with app.app_context():
        db.create_all()

    return app
