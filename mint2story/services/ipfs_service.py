import os
import re
import json
import logging
from datetime import datetime, timezone

import backoff
import requests

logger = logging.getLogger(__name__)

NFT_STORAGE_GATEWAY = "https://nftstorage.link/ipfs/"
NFT_STORAGE_API_URL = "https://api.nft.storage"
METADATA_SCHEMA_VERSION = "1.0.0"

_IPFS_URI_RE = re.compile(r'^ipfs://[a-zA-Z0-9]+$')


class IPFSConfigError(Exception):
    pass


class IPFSUploadError(Exception):
    pass


def ipfs_to_http(uri, gateway=NFT_STORAGE_GATEWAY):
    """Convert an ipfs:// URI to a gateway URL, leaving anything else untouched."""
    if not uri or not uri.startswith('ipfs://'):
        return uri
    return f"{gateway}{uri[len('ipfs://'):]}"


def is_valid_ipfs_uri(uri):
    return bool(uri) and bool(_IPFS_URI_RE.match(uri))


def linear_wait(step=1.0):
    """backoff wait generator yielding step, 2*step, 3*step, ..."""
    # backoff primes the generator with send(None)
    yield
    attempt = 1
    while True:
        yield step * attempt
        attempt += 1


def _log_retry(details):
    logger.warning(
        f"Metadata upload attempt {details['tries']} failed, retrying in {details['wait']:.2f}s"
    )


def _now_iso():
    return datetime.now(timezone.utc).isoformat()


def create_metadata(title, description, creator_handle, creator_wallet, platform, post_id,
                    permalink, media_uris, attestation_text, attestation_signature,
                    license_templates=None, royalties=None):
    """
    Build a metadata document for an IP asset

    Args:
        media_uris: list of {"type": "image"|"video", "uri": "ipfs://..."}
        royalties: optional list of {"recipient", "bps"} entries

    Returns:
        dict: metadata ready to be pinned with IPFSService.upload_metadata
    """
    return {
        "schema_version": METADATA_SCHEMA_VERSION,
        "title": title,
        "description": description,
        "creator": {
            "handle": creator_handle,
            "wallet": creator_wallet
        },
        "source": {
            "platform": platform,
            "post_id": post_id,
            "permalink": permalink,
            "timestamp": _now_iso()
        },
        "media": list(media_uris or []),
        "rights_attestation": {
            "text": attestation_text,
            "signature": attestation_signature,
            "signed_at": _now_iso()
        },
        "license_templates": license_templates or [],
        "royalties": royalties or []
    }


class IPFSService:
    def __init__(self, api_key=None, api_url=None):
        self.api_key = api_key or os.getenv("NFT_STORAGE_KEY") or os.getenv("VITE_NFT_STORAGE_KEY")
        self.api_url = api_url or os.getenv("NFT_STORAGE_API_URL", NFT_STORAGE_API_URL)

    def _headers(self):
        if not self.api_key:
            raise IPFSConfigError(
                "NFT_STORAGE_KEY is not defined. Set NFT_STORAGE_KEY (or VITE_NFT_STORAGE_KEY) in your .env file"
            )
        return {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json"
        }

    def _post_metadata(self, body, headers):
        response = requests.post(f"{self.api_url}/upload", data=body, headers=headers, timeout=30)
        response.raise_for_status()
        cid = response.json().get("value", {}).get("cid")
        if not cid:
            raise IPFSUploadError("nft.storage response did not include a CID")
        return f"ipfs://{cid}"

    def upload_metadata(self, metadata, retries=3, delay=1.0):
        """
        Pin a metadata document to IPFS via nft.storage

        Args:
            metadata: dict following the create_metadata layout
            retries: number of attempts before giving up
            delay: seconds multiplied by the attempt number between attempts

        Returns:
            str: ipfs:// URI of the pinned document
        """
        if not metadata:
            raise ValueError("No metadata provided for upload")

        headers = self._headers()

        if not metadata.get("title"):
            logger.warning("metadata.title is missing")
        if not metadata.get("creator"):
            logger.warning("metadata.creator is missing")
        if not metadata.get("media"):
            logger.warning("metadata.media is empty or missing")

        body = json.dumps(metadata, indent=2)
        logger.info(f"Uploading metadata to IPFS ({len(body)} bytes)")

        post = backoff.on_exception(
            linear_wait,
            (requests.RequestException, ValueError, IPFSUploadError),
            max_tries=retries,
            jitter=None,
            on_backoff=_log_retry,
            step=delay,
        )(self._post_metadata)

        try:
            uri = post(body, headers)
        except (requests.RequestException, ValueError, IPFSUploadError) as e:
            raise IPFSUploadError(f"Metadata upload failed: {str(e)}") from e

        logger.info(f"Metadata uploaded successfully: {uri}")
        return uri
