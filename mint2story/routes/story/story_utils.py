# mint2story/routes/story/story_utils.py
import logging
from functools import wraps
from http import HTTPStatus
from flask import jsonify, request

logger = logging.getLogger(__name__)

MAX_BPS = 10_000


def error_response(code, message, status, details=None):
    error = {'code': code, 'message': message}
    if details is not None:
        error['details'] = details
    return jsonify({'success': False, 'error': error}), status


def result_error_response(result):
    """Map a failed StoryResult onto the error envelope: 400 for rejected input, 500 otherwise."""
    status = HTTPStatus.BAD_REQUEST if result.error.validation else HTTPStatus.INTERNAL_SERVER_ERROR
    return jsonify(result.to_dict()), status


def invalid_body(field_errors):
    return error_response(
        'INVALID_BODY',
        'Invalid request body',
        HTTPStatus.BAD_REQUEST,
        {'formErrors': [], 'fieldErrors': field_errors}
    )


def _require_string(data, key, errors):
    value = data.get(key)
    if not isinstance(value, str) or len(value) < 1:
        errors.setdefault(key, []).append(f'{key} must be a non-empty string')
    return value


def _validate_split_list(value, key, errors, required):
    if value is None and not required:
        return []
    if not isinstance(value, list):
        errors.setdefault(key, []).append(f'{key} must be an array')
        return []
    for index, split in enumerate(value):
        prefix = f'{key}.{index}'
        if not isinstance(split, dict):
            errors.setdefault(prefix, []).append('Expected an object with recipient and bps')
            continue
        recipient = split.get('recipient')
        if not isinstance(recipient, str) or len(recipient) < 1:
            errors.setdefault(f'{prefix}.recipient', []).append('recipient must be a non-empty string')
        bps = split.get('bps')
        if isinstance(bps, bool) or not isinstance(bps, int):
            errors.setdefault(f'{prefix}.bps', []).append('bps must be an integer')
        elif bps < 0 or bps > MAX_BPS:
            errors.setdefault(f'{prefix}.bps', []).append(f'bps must be between 0 and {MAX_BPS}')
    return value


def validate_register_body(data):
    errors = {}
    _require_string(data, 'metadataUri', errors)
    _require_string(data, 'creatorWallet', errors)
    royalties = _validate_split_list(data.get('royalties'), 'royalties', errors, required=False)
    if errors:
        return None, errors
    return {
        'metadata_uri': data['metadataUri'],
        'creator_wallet': data['creatorWallet'],
        'royalties': royalties
    }, None


def validate_royalty_body(data):
    errors = {}
    _require_string(data, 'assetId', errors)
    splits = _validate_split_list(data.get('splits'), 'splits', errors, required=True)
    if errors:
        return None, errors
    return {'asset_id': data['assetId'], 'splits': splits}, None


def validate_create_terms_body(data):
    errors = {}
    _require_string(data, 'assetId', errors)
    if not isinstance(data.get('terms'), dict):
        errors.setdefault('terms', []).append('terms must be an object')
    if errors:
        return None, errors
    return {'asset_id': data['assetId'], 'terms_config': data['terms']}, None


def validate_attach_terms_body(data):
    errors = {}
    _require_string(data, 'assetId', errors)
    terms_id = data.get('termsId')
    if isinstance(terms_id, int) and not isinstance(terms_id, bool):
        terms_id = str(terms_id)
    if not isinstance(terms_id, str) or len(terms_id) < 1:
        errors.setdefault('termsId', []).append('termsId must be a non-empty string')
    if errors:
        return None, errors
    return {'asset_id': data['assetId'], 'terms_id': terms_id}, None


def _optional_type(data, key, expected, label, errors):
    value = data.get(key)
    if value is not None and not isinstance(value, expected):
        errors.setdefault(key, []).append(f'{key} must be {label}')
        return None
    return value


def validate_metadata_body(data):
    errors = {}
    _require_string(data, 'title', errors)
    creator = _optional_type(data, 'creator', dict, 'an object', errors)
    source = _optional_type(data, 'source', dict, 'an object', errors)
    attestation = _optional_type(data, 'rights_attestation', dict, 'an object', errors)
    media = _optional_type(data, 'media', list, 'an array', errors)
    license_templates = _optional_type(data, 'license_templates', list, 'an array', errors)
    royalties = _validate_split_list(data.get('royalties'), 'royalties', errors, required=False)
    if errors:
        return None, errors
    return {
        'title': data['title'],
        'description': data.get('description', ''),
        'creator': creator or {},
        'source': source or {},
        'rights_attestation': attestation or {},
        'media': media or [],
        'license_templates': license_templates,
        'royalties': royalties
    }, None


def json_body(f):
    """Reject non-object JSON bodies with INVALID_BODY and pass the parsed body through."""
    @wraps(f)
    def decorated(*args, **kwargs):
        data = request.get_json(silent=True)
        if not isinstance(data, dict):
            return invalid_body({'_root': ['Request body must be a JSON object']})
        return f(data, *args, **kwargs)
    return decorated


def handle_story_errors(f):
    @wraps(f)
    def decorated_function(*args, **kwargs):
        try:
            return f(*args, **kwargs)
        except Exception as e:
            logger.exception(f"{request.path} unexpected error")
            return error_response('INTERNAL_SERVER_ERROR', str(e) or 'Unknown error',
                                  HTTPStatus.INTERNAL_SERVER_ERROR)
    return decorated_function
