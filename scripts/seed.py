"""Seed the database with a demo creator and one asset."""
import os
import sys
import logging

repo_root = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))
if repo_root not in sys.path:
    sys.path.insert(0, repo_root)

from mint2story import create_app
from mint2story.extensions.extension import db
from mint2story.models.user import User
from mint2story.models.asset import Asset

logger = logging.getLogger('seed')

CREATOR_EMAIL = 'creator@example.com'
CREATOR_PASSWORD = 'password123'
CREATOR_WALLET = '0x1234567890123456789012345678901234567890'


def seed():
    user = User.query.filter_by(email=CREATOR_EMAIL).first()
    if not user:
        user = User(email=CREATOR_EMAIL, wallet_address=CREATOR_WALLET)
        user.password = CREATOR_PASSWORD
        db.session.add(user)
        db.session.commit()
    logger.info(f"Creator: {user.to_dict()}")

    asset = Asset(
        title='Seeded Asset',
        description='This is a test asset created via seed script.',
        price=0.05,
        category='Art',
        image_url='https://picsum.photos/200',
        creator_id=user.id
    )
    db.session.add(asset)
    db.session.commit()
    logger.info(f"Asset: {asset.to_dict()}")
    return user, asset


if __name__ == '__main__':
    logging.basicConfig(level=logging.INFO)
    app = create_app(os.getenv('FLASK_ENV', 'default'))
    with app.app_context():
        try:
            seed()
        except Exception:
            db.session.rollback()
            logger.exception("Seeding failed")
            sys.exit(1)
