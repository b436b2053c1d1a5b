"""Tests for the Story Protocol workflow: registration, royalties and license terms."""
from types import SimpleNamespace

import pytest

from mint2story.services import story_service
from mint2story.services.story_service import (
    RoyaltySplit,
    StoryValidationError,
    register_asset,
    set_royalty_config,
    create_terms,
    attach_terms,
)
from tests.story_fakes import SdkMethod, make_client, REGISTRY_ADDRESS

METADATA_URI = "ipfs://bafybeigdyrzt5sfp7udm7hu76uh7y26nf3efuylqabf3oclgtqy55fbzdi"
CREATOR = "0x1234567890123456789012345678901234567890"


def test_register_rejects_non_ipfs_uri_before_building_client(forbid_client):
    result = register_asset("https://example.com/meta.json", CREATOR)

    assert not result.success
    assert result.error.code == "REGISTER_ASSET_FAILED"
    assert result.error.validation
    assert "IPFS URI" in result.error.message
    assert forbid_client == []


def test_register_requires_creator_wallet(forbid_client):
    result = register_asset(METADATA_URI, "")

    assert not result.success
    assert result.error.message == "creatorWallet is required"
    assert forbid_client == []


def test_register_rejects_royalties_over_total(forbid_client):
    royalties = [{"recipient": "0xa", "bps": 6000}, {"recipient": "0xb", "bps": 4001}]

    result = register_asset(METADATA_URI, CREATOR, royalties)

    assert not result.success
    assert result.error.validation
    assert forbid_client == []


def test_register_with_composite_helper(install_client):
    composite = SdkMethod({"ipId": "0xasset", "txHash": "0xtx"})
    royalty = SdkMethod({"txHash": "0xroyalty"})
    install_client(make_client(
        ip_asset={"mintAndRegisterAndCreateTermsAndAttach": composite},
        royalty={"setRoyaltyConfig": royalty},
    ))

    result = register_asset(METADATA_URI, CREATOR, [{"recipient": "0xa", "bps": 500}])

    assert result.success
    assert result.data == {"asset_id": "0xasset", "tx_hash": "0xtx", "royalty_configured": True}
    assert composite.calls == [{
        "registry_address": REGISTRY_ADDRESS,
        "ip_metadata_uri": METADATA_URI,
        "creator": CREATOR,
        "royalties": [{"recipient": "0xa", "bps": 500}],
    }]
    assert royalty.calls == []


def test_register_falls_back_to_legacy_methods(install_client):
    register = SdkMethod({"assetId": "0xlegacy", "transactionHash": "0xlegacytx"})
    royalty = SdkMethod({"transactionHash": "0xroyaltytx"})
    install_client(make_client(
        ip_asset={"mintAndRegisterIpAsset": register},
        royalty={"configureRoyaltyForIp": royalty},
    ))

    result = register_asset(METADATA_URI, CREATOR, [{"recipient": "0xa", "bps": 1000}])

    assert result.success
    assert result.data["asset_id"] == "0xlegacy"
    assert result.data["tx_hash"] == "0xlegacytx"
    assert result.data["royalty_configured"] is True
    assert register.calls == [{
        "registry_address": REGISTRY_ADDRESS,
        "ip_metadata_uri": METADATA_URI,
        "creator": CREATOR,
    }]
    assert royalty.calls == [{"ip_id": "0xlegacy", "splits": [{"recipient": "0xa", "bps": 1000}]}]


def test_register_succeeds_when_royalty_step_fails(install_client):
    register = SdkMethod({"ipId": "0xasset", "txHash": "0xtx"})
    royalty = SdkMethod(error=RuntimeError("royalty module reverted"))
    install_client(make_client(
        ip_asset={"mintAndRegisterIpAsset": register},
        royalty={"setRoyaltyConfig": royalty},
    ))

    result = register_asset(METADATA_URI, CREATOR, [{"recipient": "0xa", "bps": 1000}])

    assert result.success
    assert result.data["asset_id"] == "0xasset"
    assert result.data["tx_hash"] == "0xtx"
    assert result.data["royalty_configured"] is False
    assert len(royalty.calls) == 1


def test_register_without_royalties_skips_royalty_module(install_client):
    register = SdkMethod({"ipId": "0xasset", "txHash": "0xtx"})
    install_client(make_client(ip_asset={"mint_and_register_ip": register}))

    result = register_asset(METADATA_URI, CREATOR)

    assert result.success
    assert result.data["royalty_configured"] is None


def test_register_fails_when_response_lacks_identifiers(install_client):
    install_client(make_client(ip_asset={"mintAndRegisterIpAsset": SdkMethod({"txHash": "0xtx"})}))

    result = register_asset(METADATA_URI, CREATOR)

    assert not result.success
    assert result.error.code == "REGISTER_ASSET_FAILED"
    assert not result.error.validation
    assert result.error.details["name"] == "RuntimeError"


def test_register_reads_attribute_responses_and_byte_hashes(install_client):
    response = SimpleNamespace(ipAssetId="0xattr", tx_hash=bytes.fromhex("abcd"))
    install_client(make_client(ip_asset={"mintAndRegisterIpAsset": SdkMethod(response)}))

    result = register_asset(METADATA_URI, CREATOR)

    assert result.success
    assert result.data["asset_id"] == "0xattr"
    assert result.data["tx_hash"] == "0xabcd"


def test_register_requires_registry_contract(install_client, monkeypatch):
    monkeypatch.delenv("STORY_REGISTRY_CONTRACT")
    install_client(make_client(ip_asset={"mintAndRegisterIpAsset": SdkMethod({"ipId": "0x1", "txHash": "0x2"})}))

    result = register_asset(METADATA_URI, CREATOR)

    assert not result.success
    assert result.error.message == "Missing required environment variable: STORY_REGISTRY_CONTRACT"


def test_sdk_exception_is_normalized(install_client, caplog):
    install_client(make_client(ip_asset={"mintAndRegisterIpAsset": SdkMethod(error=ValueError("nonce too low"))}))

    with caplog.at_level("ERROR", logger=story_service.logger.name):
        result = register_asset(METADATA_URI, CREATOR)

    assert result.to_dict()["success"] is False
    error = result.to_dict()["error"]
    assert error["code"] == "REGISTER_ASSET_FAILED"
    assert error["message"] == "nonce too low"
    assert error["details"] == {"name": "ValueError"}
    assert any(record.exc_info and record.exc_info[1].args == ("nonce too low",) for record in caplog.records)


def test_set_royalty_config_rejects_total_over_10000_without_external_call(forbid_client):
    result = set_royalty_config("0xasset", [
        {"recipient": "0xa", "bps": 5000},
        {"recipient": "0xb", "bps": 5001},
    ])

    assert not result.success
    assert result.error.code == "SET_ROYALTY_CONFIG_FAILED"
    assert result.error.validation
    assert result.error.message == "Total royalty BPS cannot exceed 10,000 (100%)"
    assert forbid_client == []


def test_set_royalty_config_accepts_exactly_10000(install_client):
    royalty = SdkMethod({"txHash": "0xroyalty"})
    install_client(make_client(
        ip_asset={"mintAndRegisterIpAsset": SdkMethod()},
        royalty={"setRoyaltyConfig": royalty},
    ))

    result = set_royalty_config("0xasset", [RoyaltySplit("0xa", 7000), RoyaltySplit("0xb", 3000)])

    assert result.success
    assert result.data == {"tx_hash": "0xroyalty"}


@pytest.mark.parametrize("splits", [[], None, "0xa:100"])
def test_set_royalty_config_requires_split_list(forbid_client, splits):
    result = set_royalty_config("0xasset", splits)

    assert not result.success
    assert result.error.message == "splits must be a non-empty array"


def test_set_royalty_config_uses_first_candidate_method(install_client):
    first = SdkMethod({"txHash": "0xfirst"})
    last = SdkMethod({"txHash": "0xlast"})
    install_client(make_client(
        ip_asset={"mintAndRegisterIpAsset": SdkMethod()},
        royalty={"configureRoyalty": last, "setRoyaltyConfig": first},
    ))

    result = set_royalty_config("0xasset", [{"recipient": "0xa", "bps": 100}])

    assert result.data["tx_hash"] == "0xfirst"
    assert last.calls == []


def test_set_royalty_config_without_compatible_method(install_client):
    install_client(make_client(
        ip_asset={"mintAndRegisterIpAsset": SdkMethod()},
        royalty={"payRoyaltyOnBehalf": SdkMethod()},
    ))

    result = set_royalty_config("0xasset", [{"recipient": "0xa", "bps": 100}])

    assert not result.success
    assert not result.error.validation
    assert "No compatible Story Protocol royalty configuration method" in result.error.message


def test_create_terms_with_license_terms_variant(install_client):
    create = SdkMethod({"licenseTermsId": 7, "txHash": "0xterms"})
    install_client(make_client(
        ip_asset={"mintAndRegisterIpAsset": SdkMethod()},
        license={"createLicenseTerms": create},
    ))

    result = create_terms("0xasset", {"commercialUse": True, "mintingFee": 0})

    assert result.success
    assert result.data == {"terms_id": "7", "tx_hash": "0xterms"}
    assert create.calls == [{"ip_id": "0xasset", "commercialUse": True, "mintingFee": 0}]


def test_create_terms_requires_object_config(forbid_client):
    result = create_terms("0xasset", None)

    assert not result.success
    assert result.error.code == "CREATE_TERMS_FAILED"
    assert result.error.message == "termsConfig must be a non-null object"


def test_create_terms_without_license_module(install_client):
    install_client(make_client(ip_asset={"mintAndRegisterIpAsset": SdkMethod()}))

    result = create_terms("0xasset", {})

    assert not result.success
    assert result.error.message == "Story Protocol SDK does not expose a license/terms module"


def test_attach_terms_variants_use_their_own_argument_names(install_client):
    attach = SdkMethod({"txHash": "0xattach"})
    install_client(make_client(
        ip_asset={"mintAndRegisterIpAsset": SdkMethod()},
        license={"attachLicenseTerms": attach},
    ))

    result = attach_terms("0xasset", "12")

    assert result.success
    assert result.data == {"tx_hash": "0xattach"}
    assert attach.calls == [{"ip_id": "0xasset", "license_terms_id": "12"}]


def test_attach_terms_requires_tx_hash(install_client):
    install_client(make_client(
        ip_asset={"mintAndRegisterIpAsset": SdkMethod()},
        license={"attachTerms": SdkMethod({})},
    ))

    result = attach_terms("0xasset", "12")

    assert not result.success
    assert result.error.code == "ATTACH_TERMS_FAILED"


def test_client_is_built_once(install_client):
    register = SdkMethod({"ipId": "0xasset", "txHash": "0xtx"})
    builds = install_client(make_client(ip_asset={"mintAndRegisterIpAsset": register}))

    register_asset(METADATA_URI, CREATOR)
    register_asset(METADATA_URI, CREATOR)

    assert len(builds) == 1
    assert len(register.calls) == 2


def test_failed_client_build_is_retried(monkeypatch):
    client = make_client(ip_asset={"mintAndRegisterIpAsset": SdkMethod({"ipId": "0x1", "txHash": "0x2"})})
    attempts = []

    def build():
        attempts.append(True)
        if len(attempts) == 1:
            raise ConnectionError("rpc unreachable")
        return client

    monkeypatch.setattr(story_service, "_build_client", build)

    first = register_asset(METADATA_URI, CREATOR)
    second = register_asset(METADATA_URI, CREATOR)

    assert not first.success
    assert first.error.message == "rpc unreachable"
    assert second.success
    assert len(attempts) == 2


def test_missing_private_key_is_reported(monkeypatch):
    monkeypatch.delenv("STORY_PRIVATE_KEY")

    result = register_asset(METADATA_URI, CREATOR)

    assert not result.success
    assert result.error.message == "Missing required environment variable: STORY_PRIVATE_KEY"


@pytest.mark.parametrize("bps", [-1, 10001, True, 1.5, "100"])
def test_royalty_split_rejects_invalid_bps(bps):
    with pytest.raises(StoryValidationError):
        RoyaltySplit("0xa", bps)


def test_royalty_split_rejects_empty_recipient():
    with pytest.raises(StoryValidationError):
        RoyaltySplit("", 100)
