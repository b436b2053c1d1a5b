"""
Story Protocol integration: register IP assets, manage license terms and
configure royalties on the Story testnet.

Environment variables (server-side only):
- STORY_PRIVATE_KEY        operator wallet private key
- STORY_TESTNET_RPC        RPC URL for the Story testnet
- STORY_REGISTRY_CONTRACT  IP asset registry / NFT contract address
- STORY_CHAIN_ID           optional, defaults to the Aeneid testnet (1315)
- STORY_SDK_ADAPTER        optional, forces an adapter ("composite" or "two-step")
"""
import os
import re
import logging
import threading
from dataclasses import dataclass, field
from typing import Any, Optional

from mint2story.services.story_adapters import select_adapter

logger = logging.getLogger(__name__)

MAX_TOTAL_BPS = 10_000
AENEID_CHAIN_ID = 1315

REGISTER_ASSET_FAILED = 'REGISTER_ASSET_FAILED'
SET_ROYALTY_CONFIG_FAILED = 'SET_ROYALTY_CONFIG_FAILED'
CREATE_TERMS_FAILED = 'CREATE_TERMS_FAILED'
ATTACH_TERMS_FAILED = 'ATTACH_TERMS_FAILED'

ASSET_ID_KEYS = ('ipId', 'assetId', 'id', 'ipAssetId', 'ip_id', 'asset_id', 'ip_asset_id')
TERMS_ID_KEYS = ('termsId', 'licenseTermsId', 'id', 'terms_id', 'license_terms_id')
TX_HASH_KEYS = ('txHash', 'transactionHash', 'tx_hash', 'transaction_hash')


class StoryValidationError(ValueError):
    """Input rejected before any call to the SDK."""


class MissingEnvironmentError(RuntimeError):
    pass


@dataclass
class StoryError:
    code: str
    message: str
    details: Any = None
    validation: bool = False

    def to_dict(self):
        error = {'code': self.code, 'message': self.message}
        if self.details is not None:
            error['details'] = self.details
        return error


@dataclass
class StoryResult:
    success: bool
    data: dict = field(default_factory=dict)
    error: Optional[StoryError] = None

    @classmethod
    def ok(cls, **data):
        return cls(success=True, data=data)

    @classmethod
    def fail(cls, error):
        return cls(success=False, error=error)

    def to_dict(self):
        if self.success:
            return {'success': True, 'data': self.data}
        return {'success': False, 'error': self.error.to_dict()}


@dataclass
class RoyaltySplit:
    recipient: str
    bps: int

    def __post_init__(self):
        if not isinstance(self.recipient, str) or not self.recipient:
            raise StoryValidationError('Royalty recipient must be a non-empty string')
        if isinstance(self.bps, bool) or not isinstance(self.bps, int):
            raise StoryValidationError('Royalty bps must be an integer')
        if self.bps < 0 or self.bps > MAX_TOTAL_BPS:
            raise StoryValidationError(f'Royalty bps must be between 0 and {MAX_TOTAL_BPS}')

    @classmethod
    def coerce(cls, value):
        if isinstance(value, cls):
            return value
        if isinstance(value, dict):
            return cls(recipient=value.get('recipient'), bps=value.get('bps'))
        raise StoryValidationError('Royalty split must be an object with recipient and bps')

    def to_sdk(self):
        return {'recipient': self.recipient, 'bps': self.bps}


def normalize_error(error, code):
    if isinstance(error, Exception):
        logger.error(f"[Story] {code}: {type(error).__name__}", exc_info=error)
        return StoryError(
            code=code,
            message=str(error),
            details={'name': type(error).__name__},
            validation=isinstance(error, StoryValidationError),
        )
    return StoryError(code=code, message='Unknown Story Protocol error', details=error)


def get_env(name):
    value = os.getenv(name)
    if not value:
        raise MissingEnvironmentError(f'Missing required environment variable: {name}')
    return value


def _build_client():
    private_key = get_env('STORY_PRIVATE_KEY')
    rpc_url = get_env('STORY_TESTNET_RPC')
    chain_id = int(os.getenv('STORY_CHAIN_ID', AENEID_CHAIN_ID))

    from web3 import Web3
    from story_protocol_python_sdk import StoryClient

    w3 = Web3(Web3.HTTPProvider(rpc_url))
    account = w3.eth.account.from_key(f"0x{re.sub(r'^0x', '', private_key)}")
    return StoryClient(w3, account, chain_id)


_story_adapter = None
_story_lock = threading.Lock()


def get_story_adapter():
    """Build the SDK client and its adapter once, then reuse them."""
    global _story_adapter
    if _story_adapter is None:
        with _story_lock:
            if _story_adapter is None:
                try:
                    client = _build_client()
                    adapter = select_adapter(client, os.getenv('STORY_SDK_ADAPTER') or None)
                except Exception as e:
                    logger.error(f"[Story] Failed to initialize StoryClient: {str(e)}")
                    raise
                logger.info(f"[Story] Using '{adapter.name}' SDK adapter")
                _story_adapter = adapter
    return _story_adapter


def reset_story_client():
    global _story_adapter
    with _story_lock:
        _story_adapter = None


def get_registry_contract_address():
    return get_env('STORY_REGISTRY_CONTRACT')


def _as_text(value):
    # web3 returns transaction hashes as HexBytes
    if isinstance(value, (bytes, bytearray)):
        text = value.hex()
        return text if text.startswith('0x') else f'0x{text}'
    return str(value)


def extract_field(response, keys):
    """Return the first non-empty value among keys, looked up as dict keys then attributes."""
    if response is None:
        return ''
    for key in keys:
        if isinstance(response, dict):
            value = response.get(key)
        else:
            value = getattr(response, key, None)
        if value:
            return _as_text(value)
    return ''


def validate_splits(splits):
    if not isinstance(splits, (list, tuple)) or len(splits) == 0:
        raise StoryValidationError('splits must be a non-empty array')
    normalized = [RoyaltySplit.coerce(s) for s in splits]
    total_bps = sum(s.bps for s in normalized)
    if total_bps > MAX_TOTAL_BPS:
        raise StoryValidationError('Total royalty BPS cannot exceed 10,000 (100%)')
    return normalized


def register_asset(metadata_uri, creator_wallet, royalties=None):
    """
    Register an IP asset on the Story testnet

    With a composite SDK the asset, its terms and its royalties are created in a
    single call. Otherwise the asset is registered first and royalties are
    configured afterwards; a royalty failure at that point is logged and the
    registration still succeeds.

    Args:
        metadata_uri: ipfs:// URI of the asset metadata
        creator_wallet: address of the creator
        royalties: optional list of RoyaltySplit or {"recipient", "bps"} dicts

    Returns:
        StoryResult: data holds asset_id, tx_hash and royalty_configured
    """
    try:
        if not metadata_uri or not isinstance(metadata_uri, str) or not metadata_uri.startswith('ipfs://'):
            raise StoryValidationError('metadataUri must be a non-empty IPFS URI (e.g. ipfs://CID)')
        if not creator_wallet:
            raise StoryValidationError('creatorWallet is required')
        splits = validate_splits(royalties) if royalties else []

        adapter = get_story_adapter()
        registry_contract = get_registry_contract_address()
        sdk_splits = [s.to_sdk() for s in splits]

        if adapter.handles_royalties:
            logger.info(f"[Story] Using composite helper {adapter.register_method_name}")
        else:
            logger.info(f"[Story] Using ipAsset.{adapter.register_method_name}")
        response = adapter.register(registry_contract, metadata_uri, creator_wallet, sdk_splits)

        royalty_configured = True if splits and adapter.handles_royalties else None
        asset_id = extract_field(response, ASSET_ID_KEYS)
        tx_hash = extract_field(response, TX_HASH_KEYS)
        if not asset_id or not tx_hash:
            raise RuntimeError('Failed to extract assetId or txHash from Story Protocol response')

        if splits and not adapter.handles_royalties:
            royalty_result = set_royalty_config(asset_id, splits)
            royalty_configured = royalty_result.success
            if not royalty_result.success:
                logger.error(
                    f"[Story] Failed to set royalty config during registerAsset for {asset_id}: "
                    f"{royalty_result.error.message}"
                )

        return StoryResult.ok(asset_id=asset_id, tx_hash=tx_hash, royalty_configured=royalty_configured)
    except Exception as e:
        logger.error(f"[Story] registerAsset error: {str(e)}")
        return StoryResult.fail(normalize_error(e, REGISTER_ASSET_FAILED))


def set_royalty_config(asset_id, splits):
    """Configure royalty distribution for an IP asset via the royalty module."""
    try:
        if not asset_id:
            raise StoryValidationError('assetId is required')
        normalized = validate_splits(splits)

        adapter = get_story_adapter()
        response = adapter.set_royalty_config(asset_id, [s.to_sdk() for s in normalized])

        tx_hash = extract_field(response, TX_HASH_KEYS)
        if not tx_hash:
            raise RuntimeError('Failed to extract txHash from Story Protocol royalty response')

        return StoryResult.ok(tx_hash=tx_hash)
    except Exception as e:
        logger.error(f"[Story] setRoyaltyConfig error: {str(e)}")
        return StoryResult.fail(normalize_error(e, SET_ROYALTY_CONFIG_FAILED))


def create_terms(asset_id, terms_config):
    """Create license terms for an existing IP asset."""
    try:
        if not asset_id:
            raise StoryValidationError('assetId is required')
        if not isinstance(terms_config, dict):
            raise StoryValidationError('termsConfig must be a non-null object')

        adapter = get_story_adapter()
        response = adapter.create_terms(asset_id, terms_config)

        terms_id = extract_field(response, TERMS_ID_KEYS)
        tx_hash = extract_field(response, TX_HASH_KEYS)
        if not terms_id or not tx_hash:
            raise RuntimeError('Failed to extract termsId or txHash from Story Protocol response')

        return StoryResult.ok(terms_id=terms_id, tx_hash=tx_hash)
    except Exception as e:
        logger.error(f"[Story] createTerms error: {str(e)}")
        return StoryResult.fail(normalize_error(e, CREATE_TERMS_FAILED))


def attach_terms(asset_id, terms_id):
    try:
        if not asset_id:
            raise StoryValidationError('assetId is required')
        if not terms_id:
            raise StoryValidationError('termsId is required')

        adapter = get_story_adapter()
        response = adapter.attach_terms(asset_id, terms_id)

        tx_hash = extract_field(response, TX_HASH_KEYS)
        if not tx_hash:
            raise RuntimeError('Failed to extract txHash from Story Protocol response')

        return StoryResult.ok(tx_hash=tx_hash)
    except Exception as e:
        logger.error(f"[Story] attachTerms error: {str(e)}")
        return StoryResult.fail(normalize_error(e, ATTACH_TERMS_FAILED))
