from flask import Blueprint, request, jsonify
from http import HTTPStatus
from sqlalchemy import desc
from mint2story.extensions.extension import db
from mint2story.models.asset import Asset
from mint2story.routes.auth.auth_utils import handle_errors
from mint2story.utils.auth import token_required

assets_bp = Blueprint('assets', __name__, url_prefix='/api/assets')


@assets_bp.route('', methods=['POST'])
@token_required
@handle_errors
def create_asset(current_user):
    data = request.get_json(silent=True)
    if not data:
        return jsonify({'error': 'No input data provided'}), HTTPStatus.BAD_REQUEST

    title = data.get('title')
    if not title:
        return jsonify({'error': 'Title is required'}), HTTPStatus.BAD_REQUEST

    try:
        price = float(data.get('price') or 0)
    except (TypeError, ValueError):
        return jsonify({'error': 'Price must be a number'}), HTTPStatus.BAD_REQUEST

    asset = Asset(
        title=title,
        description=data.get('description'),
        category=data.get('category'),
        price=price,
        image_url=data.get('image_url'),
        metadata_json=data.get('metadata'),
        creator_id=current_user.id
    )

    try:
        db.session.add(asset)
        db.session.commit()
    except Exception:
        db.session.rollback()
        return jsonify({'error': 'Failed to create asset'}), HTTPStatus.INTERNAL_SERVER_ERROR

    return jsonify(asset.to_dict()), HTTPStatus.CREATED


@assets_bp.route('', methods=['GET'])
@handle_errors
def list_assets():
    """List all assets, newest first"""
    assets = Asset.query.order_by(desc(Asset.created_at)).all()
    return jsonify([asset.to_dict() for asset in assets]), HTTPStatus.OK


@assets_bp.route('/<uuid:asset_id>', methods=['GET'])
@handle_errors
def get_asset(asset_id):
    asset = db.session.get(Asset, asset_id)
    if not asset:
        return jsonify({'error': 'Asset not found'}), HTTPStatus.NOT_FOUND
    return jsonify(asset.to_dict()), HTTPStatus.OK
