import os
from datetime import timedelta
from dotenv import load_dotenv

load_dotenv()


def _normalize_db_url(db_url, require_ssl=False):
    if not db_url:
        return db_url
    # Heroku-style URLs use the postgres:// scheme SQLAlchemy no longer accepts
    db_url = db_url.replace('postgres://', 'postgresql://')
    if require_ssl and db_url.startswith('postgresql') and 'sslmode=' not in db_url:
        db_url = f"{db_url}{'?' if '?' not in db_url else '&'}sslmode=require"
    return db_url


class Config:
    SECRET_KEY = os.getenv('SECRET_KEY') or 'dev-key-for-testing'
    DEBUG = False
    TESTING = False
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_DATABASE_URI = _normalize_db_url(os.environ.get('DATABASE_URL')) or 'sqlite:///mint2story.db'

    # Auth
    JWT_SECRET_KEY = os.getenv('JWT_SECRET') or SECRET_KEY
    JWT_ALGORITHM = 'HS256'
    JWT_ACCESS_TOKEN_EXPIRES = timedelta(hours=24)
    GOOGLE_CLIENT_ID = os.getenv('GOOGLE_CLIENT_ID')


class DevelopmentConfig(Config):
    DEBUG = True
    SQLALCHEMY_DATABASE_URI = _normalize_db_url(
        os.getenv('DEVELOPMENT_DATABASE_URL') or os.getenv('DATABASE_URL')
    ) or 'sqlite:///mint2story-dev.db'


class TestingConfig(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = _normalize_db_url(os.getenv('TESTING_DATABASE_URL')) or 'sqlite://'
    JWT_SECRET_KEY = 'test-jwt-secret-key-with-enough-length'
    GOOGLE_CLIENT_ID = 'test-google-client-id'


class ProductionConfig(Config):
    SQLALCHEMY_DATABASE_URI = _normalize_db_url(
        os.getenv('PRODUCTION_DATABASE_URL') or os.getenv('DATABASE_URL'),
        require_ssl=True,
    )
    JWT_SECRET_KEY = os.getenv('JWT_SECRET')


class StagingConfig(Config):
    SQLALCHEMY_DATABASE_URI = _normalize_db_url(os.getenv('DATABASE_URL'), require_ssl=True)
    JWT_SECRET_KEY = os.getenv('JWT_SECRET')


config_by_name = {
    'development': DevelopmentConfig,
    'testing': TestingConfig,
    'production': ProductionConfig,
    'staging': StagingConfig,
    'default': DevelopmentConfig
}
