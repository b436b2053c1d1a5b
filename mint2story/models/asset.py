from mint2story.extensions.extension import db
from mint2story.services.ipfs_service import ipfs_to_http
from datetime import datetime
import uuid


class Asset(db.Model):
    __tablename__ = 'assets'

    id = db.Column(db.Uuid, primary_key=True, default=uuid.uuid4)
    title = db.Column(db.String, nullable=False)
    description = db.Column(db.Text)
    category = db.Column(db.String(100))
    price = db.Column(db.Float, default=0)
    image_url = db.Column(db.String)
    # IPFS URIs and Story Protocol registration results
    metadata_json = db.Column('metadata', db.JSON)
    creator_id = db.Column(db.Uuid, db.ForeignKey('users.id'), nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    licenses = db.relationship('License', backref='asset', lazy=True)

    def to_dict(self):
        return {
            'id': str(self.id),
            'title': self.title,
            'description': self.description,
            'category': self.category,
            'price': self.price,
            'image_url': self.image_url,
            'image_gateway_url': ipfs_to_http(self.image_url) if self.image_url else None,
            'metadata': self.metadata_json,
            'creator_id': str(self.creator_id),
            'creator': {
                'email': self.creator.email,
                'wallet_address': self.creator.wallet_address
            } if self.creator else None,
            'created_at': self.created_at.isoformat() if self.created_at else None
        }

    def __repr__(self):
        return f'<Asset {self.title}>'
