"""Key set assembly scoped to the published keyring."""

from oidc_issuer.crypto.types import JWKEntry, JWKSResponse
from oidc_issuer.store.protocols import KeyStore, StateStore
from oidc_issuer.store.types import key_prefix


async def collect_jwks(key_store: KeyStore, state_store: StateStore) -> JWKSResponse:
    """Return every live key of the active keyring.

    The configured keyring is deliberately not consulted: it may name a
    keyring whose keys are still being generated.
    """
    published = await state_store.get_published()
    if published is None:
        return JWKSResponse(keys=[])

    entries: list[JWKEntry] = []
    page_token: str | None = None
    while True:
        page = await key_store.list(key_prefix(published.keyring), page_token)
        entries.extend(JWKEntry(**record.public_jwk) for record in page.records)
        page_token = page.next_page_token
        if page_token is None:
            return JWKSResponse(keys=entries)
