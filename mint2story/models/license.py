from mint2story.extensions.extension import db
from datetime import datetime
import uuid


class License(db.Model):
    __tablename__ = 'licenses'

    id = db.Column(db.Uuid, primary_key=True, default=uuid.uuid4)
    asset_id = db.Column(db.Uuid, db.ForeignKey('assets.id'), nullable=False)
    buyer_id = db.Column(db.Uuid, db.ForeignKey('users.id'), nullable=False)
    buyer_wallet = db.Column(db.String)
    price_paid = db.Column(db.Float, nullable=False)
    transaction_hash = db.Column(db.String(255))
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    buyer = db.relationship('User', backref=db.backref('licenses', lazy=True))

    def to_dict(self):
        return {
            'id': str(self.id),
            'asset_id': str(self.asset_id),
            'buyer_id': str(self.buyer_id),
            'buyer_wallet': self.buyer_wallet,
            'price_paid': self.price_paid,
            'transaction_hash': self.transaction_hash,
            'created_at': self.created_at.isoformat() if self.created_at else None
        }
