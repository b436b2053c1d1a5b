"""
Adapters over the Story Protocol SDK client.

The SDK has shipped the same operations under several names (camelCase in
older releases, snake_case in newer ones, composite helpers in some). Each
adapter binds the methods it needs once, when the client is configured, so
request handling never probes the client object.
"""
import logging

logger = logging.getLogger(__name__)

IP_ASSET_MODULES = ('ipAsset', 'IPAsset', 'ip_asset')
LICENSE_MODULES = ('license', 'License', 'terms')
ROYALTY_MODULES = ('royalty', 'Royalty', 'royalties')

COMPOSITE_REGISTER_METHODS = (
    'mintAndRegisterAndCreateTermsAndAttach',
    'mint_and_register_and_create_terms_and_attach',
)
REGISTER_METHODS = (
    'mintAndRegisterIpAsset',
    'mint_and_register_ip_asset',
    'mintAndRegisterIp',
    'mint_and_register_ip',
)
ROYALTY_METHODS = (
    'setRoyaltyConfig',
    'configureRoyaltyForIp',
    'setRoyaltyForIp',
    'configureRoyalty',
    'set_royalty_config',
    'configure_royalty_for_ip',
    'set_royalty_for_ip',
    'configure_royalty',
)
CREATE_TERMS_METHODS = (
    'createTerms',
    'createLicenseTerms',
    'create_terms',
    'create_license_terms',
)
# attach variants disagree on the name of the terms argument
ATTACH_TERMS_METHODS = (
    ('attachTerms', 'terms_id'),
    ('attachLicenseTerms', 'license_terms_id'),
    ('attach_terms', 'terms_id'),
    ('attach_license_terms', 'license_terms_id'),
)


class StoryConfigError(Exception):
    """The SDK client does not expose what an operation needs."""


def find_module(client, names):
    for name in names:
        module = getattr(client, name, None)
        if module is not None:
            return module
    return None


def find_method(module, names):
    """Return (name, callable) for the first callable attribute in names, or (None, None)."""
    if module is None:
        return None, None
    for name in names:
        method = getattr(module, name, None)
        if callable(method):
            return name, method
    return None, None


class StoryAdapter:
    name = None
    handles_royalties = False
    register_methods = ()

    def __init__(self, client):
        self.client = client
        self.ip_asset = find_module(client, IP_ASSET_MODULES)
        self.license = find_module(client, LICENSE_MODULES)
        self.royalty = find_module(client, ROYALTY_MODULES)

        self.register_method_name, self._register = find_method(self.ip_asset, self.register_methods)
        if self._register is None:
            raise StoryConfigError(
                f"Story Protocol SDK does not expose any of {', '.join(self.register_methods)}"
            )

        self.royalty_method_name, self._set_royalty = find_method(self.royalty, ROYALTY_METHODS)
        self.create_terms_method_name, self._create_terms = find_method(self.license, CREATE_TERMS_METHODS)

        self.attach_terms_method_name = None
        self._attach_terms = None
        self._attach_terms_arg = None
        for method_name, arg_name in ATTACH_TERMS_METHODS:
            found_name, method = find_method(self.license, (method_name,))
            if method is not None:
                self.attach_terms_method_name = found_name
                self._attach_terms = method
                self._attach_terms_arg = arg_name
                break

        logger.info(
            f"Story adapter '{self.name}' bound: register={self.register_method_name}, "
            f"royalty={self.royalty_method_name}, create_terms={self.create_terms_method_name}, "
            f"attach_terms={self.attach_terms_method_name}"
        )

    def register(self, registry_address, metadata_uri, creator, royalties):
        raise NotImplementedError

    def set_royalty_config(self, ip_id, splits):
        if self.royalty is None:
            raise StoryConfigError("Story Protocol SDK does not expose a royalty module")
        if self._set_royalty is None:
            raise StoryConfigError(
                "No compatible Story Protocol royalty configuration method found on royalty module"
            )
        return self._set_royalty(ip_id=ip_id, splits=splits)

    def create_terms(self, ip_id, terms_config):
        if self.license is None:
            raise StoryConfigError("Story Protocol SDK does not expose a license/terms module")
        if self._create_terms is None:
            raise StoryConfigError(
                "No compatible Story Protocol createTerms function found (expected createTerms or createLicenseTerms)"
            )
        return self._create_terms(ip_id=ip_id, **terms_config)

    def attach_terms(self, ip_id, terms_id):
        if self.license is None:
            raise StoryConfigError("Story Protocol SDK does not expose a license/terms module")
        if self._attach_terms is None:
            raise StoryConfigError(
                "No compatible Story Protocol attachTerms function found (expected attachTerms or attachLicenseTerms)"
            )
        return self._attach_terms(ip_id=ip_id, **{self._attach_terms_arg: terms_id})


class CompositeAdapter(StoryAdapter):
    """SDKs that mint, register, create terms and attach royalties in one call."""
    name = 'composite'
    handles_royalties = True
    register_methods = COMPOSITE_REGISTER_METHODS

    def register(self, registry_address, metadata_uri, creator, royalties):
        return self._register(
            registry_address=registry_address,
            ip_metadata_uri=metadata_uri,
            creator=creator,
            royalties=royalties,
        )


class TwoStepAdapter(StoryAdapter):
    """SDKs that only register; royalties are configured with a separate call."""
    name = 'two-step'
    handles_royalties = False
    register_methods = REGISTER_METHODS

    def register(self, registry_address, metadata_uri, creator, royalties):
        return self._register(
            registry_address=registry_address,
            ip_metadata_uri=metadata_uri,
            creator=creator,
        )


ADAPTERS = {
    CompositeAdapter.name: CompositeAdapter,
    TwoStepAdapter.name: TwoStepAdapter,
}


def select_adapter(client, preferred=None):
    """
    Pick the adapter matching the SDK client

    Args:
        client: a Story Protocol SDK client (or anything shaped like one)
        preferred: adapter name forcing the choice, e.g. from STORY_SDK_ADAPTER

    Returns:
        StoryAdapter: adapter bound to the client
    """
    if preferred:
        adapter_cls = ADAPTERS.get(preferred)
        if adapter_cls is None:
            raise StoryConfigError(
                f"Unknown Story SDK adapter '{preferred}'. Expected one of: {', '.join(ADAPTERS)}"
            )
        return adapter_cls(client)

    ip_asset = find_module(client, IP_ASSET_MODULES)
    if ip_asset is None:
        raise StoryConfigError("Story Protocol SDK does not expose an IP asset module")

    if find_method(ip_asset, COMPOSITE_REGISTER_METHODS)[1] is not None:
        return CompositeAdapter(client)
    if find_method(ip_asset, REGISTER_METHODS)[1] is not None:
        return TwoStepAdapter(client)

    raise StoryConfigError("Story Protocol SDK does not expose a compatible IP asset registration method")
