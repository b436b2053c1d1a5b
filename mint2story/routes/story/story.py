from flask import Blueprint, jsonify
from http import HTTPStatus
from mint2story.services import story_service
from mint2story.services.ipfs_service import IPFSService, IPFSConfigError, IPFSUploadError, create_metadata, ipfs_to_http
from mint2story.utils.auth import token_required
from mint2story.routes.story.story_utils import (
    error_response,
    result_error_response,
    invalid_body,
    json_body,
    handle_story_errors,
    validate_register_body,
    validate_royalty_body,
    validate_create_terms_body,
    validate_attach_terms_body,
    validate_metadata_body
)

story_bp = Blueprint('story', __name__, url_prefix='/api')


@story_bp.route('/register', methods=['POST'])
@handle_story_errors
@json_body
def register_asset(data):
    """Register an IP asset on Story Protocol, optionally with royalty splits"""
    body, errors = validate_register_body(data)
    if errors:
        return invalid_body(errors)

    result = story_service.register_asset(body['metadata_uri'], body['creator_wallet'], body['royalties'])
    if not result.success:
        return result_error_response(result)

    return jsonify({
        'success': True,
        'assetId': result.data['asset_id'],
        'txHash': result.data['tx_hash'],
        'royaltyConfigured': result.data['royalty_configured']
    }), HTTPStatus.OK


@story_bp.route('/setRoyalty', methods=['POST'])
@handle_story_errors
@json_body
def set_royalty(data):
    body, errors = validate_royalty_body(data)
    if errors:
        return invalid_body(errors)

    result = story_service.set_royalty_config(body['asset_id'], body['splits'])
    if not result.success:
        return result_error_response(result)

    return jsonify({'success': True, 'txHash': result.data['tx_hash']}), HTTPStatus.OK


@story_bp.route('/createTerms', methods=['POST'])
@handle_story_errors
@json_body
def create_terms(data):
    body, errors = validate_create_terms_body(data)
    if errors:
        return invalid_body(errors)

    result = story_service.create_terms(body['asset_id'], body['terms_config'])
    if not result.success:
        return result_error_response(result)

    return jsonify({
        'success': True,
        'termsId': result.data['terms_id'],
        'txHash': result.data['tx_hash']
    }), HTTPStatus.OK


@story_bp.route('/attachTerms', methods=['POST'])
@handle_story_errors
@json_body
def attach_terms(data):
    body, errors = validate_attach_terms_body(data)
    if errors:
        return invalid_body(errors)

    result = story_service.attach_terms(body['asset_id'], body['terms_id'])
    if not result.success:
        return result_error_response(result)

    return jsonify({'success': True, 'txHash': result.data['tx_hash']}), HTTPStatus.OK


@story_bp.route('/metadata', methods=['POST'])
@token_required
@handle_story_errors
@json_body
def upload_metadata(data, current_user):
    """Build the asset metadata document and pin it to IPFS"""
    body, errors = validate_metadata_body(data)
    if errors:
        return invalid_body(errors)

    creator = body['creator']
    source = body['source']
    attestation = body['rights_attestation']
    metadata = create_metadata(
        title=body['title'],
        description=body['description'],
        creator_handle=creator.get('handle'),
        creator_wallet=creator.get('wallet') or current_user.wallet_address,
        platform=source.get('platform'),
        post_id=source.get('post_id'),
        permalink=source.get('permalink'),
        media_uris=body['media'],
        attestation_text=attestation.get('text'),
        attestation_signature=attestation.get('signature'),
        license_templates=body['license_templates'],
        royalties=body['royalties']
    )

    try:
        uri = IPFSService().upload_metadata(metadata)
    except (IPFSConfigError, IPFSUploadError) as e:
        return error_response('IPFS_UPLOAD_FAILED', str(e), HTTPStatus.INTERNAL_SERVER_ERROR)

    return jsonify({'success': True, 'uri': uri, 'gatewayUrl': ipfs_to_http(uri)}), HTTPStatus.CREATED
