from flask import Blueprint, request, jsonify
from http import HTTPStatus
import logging
import uuid
from mint2story.extensions.extension import db
from mint2story.models.asset import Asset
from mint2story.models.license import License
from mint2story.routes.auth.auth_utils import handle_errors
from mint2story.utils.auth import token_required

logger = logging.getLogger(__name__)

licenses_bp = Blueprint('licenses', __name__, url_prefix='/api/licenses')


@licenses_bp.route('/purchase', methods=['POST'])
@token_required
@handle_errors
def purchase_license(current_user):
    """Record a license purchase for an asset"""
    data = request.get_json(silent=True)
    if not data or 'assetId' not in data:
        return jsonify({'error': 'Asset ID is required'}), HTTPStatus.BAD_REQUEST

    try:
        asset_id = uuid.UUID(str(data['assetId']))
    except ValueError:
        return jsonify({'error': 'Invalid asset ID format'}), HTTPStatus.BAD_REQUEST

    try:
        price_paid = float(data.get('pricePaid'))
    except (TypeError, ValueError):
        return jsonify({'error': 'pricePaid must be a number'}), HTTPStatus.BAD_REQUEST

    asset = db.session.get(Asset, asset_id)
    if not asset:
        return jsonify({'error': 'Asset not found'}), HTTPStatus.NOT_FOUND

    license = License(
        asset_id=asset.id,
        buyer_id=current_user.id,
        buyer_wallet=data.get('buyerWallet'),
        price_paid=price_paid,
        transaction_hash=data.get('transactionHash')
    )

    try:
        db.session.add(license)
        db.session.commit()
    except Exception as e:
        db.session.rollback()
        logger.error(f"Error purchasing license: {str(e)}")
        return jsonify({'error': 'Failed to purchase license'}), HTTPStatus.INTERNAL_SERVER_ERROR

    return jsonify(license.to_dict()), HTTPStatus.CREATED
