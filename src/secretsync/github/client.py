"""Async HTTP client for the GitHub Actions repository secrets API.

Each request opens its own httpx.AsyncClient, so one GitHubClient can be
used from successive event loops (fetch in one, apply in another).
"""

import logging
from typing import Any
from urllib.parse import quote

import httpx

from secretsync import __version__
from secretsync.config import SyncConfig
from secretsync.errors import RemoteError
from secretsync.models import ExistingSecretRef, RecipientKey
from secretsync.security.sealing import decode_public_key

logger = logging.getLogger(__name__)

PAGE_SIZE = 100


def _secret_path(name: str) -> str:
    """Path segment for one secret; the name never spills into the query."""
    return "/" + quote(name, safe="")


class GitHubClient:
    """Repository-scoped secrets API client.

    Args:
        config: Run configuration with owner, repository, token and API URL.
        transport: Optional httpx transport, mainly for tests.
    """

    def __init__(
        self,
        config: SyncConfig,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        api_url = config.api_url.strip()
        if not api_url.startswith(("http://", "https://")):
            raise ValueError("api_url must start with http:// or https://")

        self.base_url = api_url.rstrip("/")
        self.repo_path = f"/repos/{config.organization}/{config.repository}/actions/secrets"
        self.timeout = config.timeout
        self._token = config.token
        self._transport = transport

    def _headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self._token.get_secret_value()}",
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": "2022-11-28",
            "User-Agent": f"secretsync/{__version__}",
        }

    async def _request(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        """Send one request and map failures to RemoteError.

        Raises:
            RemoteError: On a non-2xx response or a transport failure.
        """
        url = f"{self.base_url}{self.repo_path}{path}"
        try:
            async with httpx.AsyncClient(
                timeout=self.timeout,
                headers=self._headers(),
                transport=self._transport,
            ) as client:
                resp = await client.request(method, url, **kwargs)
        except httpx.RequestError as e:
            raise RemoteError(None, f"{method} {url} failed: {e}") from e

        if resp.is_success:
            return resp

        try:
            data = resp.json()
        except ValueError:
            data = None
        message = data.get("message", resp.text) if isinstance(data, dict) else resp.text
        raise RemoteError(resp.status_code, message or resp.reason_phrase)

    async def fetch_public_key(self) -> RecipientKey:
        """Fetch the repository's secrets public key.

        Returns:
            RecipientKey with raw key bytes.

        Raises:
            RemoteError: If the request fails or the body is malformed.
            EncodeError: If the key is not valid base64.
        """
        resp = await self._request("GET", "/public-key")
        try:
            body = resp.json()
            key_id, key_b64 = body["key_id"], body["key"]
        except (ValueError, KeyError, TypeError) as e:
            raise RemoteError(resp.status_code, f"Malformed public key response: {e!r}") from e
        key = RecipientKey(key_id=key_id, key_bytes=decode_public_key(key_b64))
        logger.debug("Fetched public key %s.", key.key_id)
        return key

    async def fetch_existing_secrets(self) -> list[ExistingSecretRef]:
        """List every secret registered on the repository.

        Follows pagination until total_count names are read or a page
        comes back short.

        Returns:
            Existing secret references in API order.

        Raises:
            RemoteError: If any page request fails.
        """
        refs: list[ExistingSecretRef] = []
        page = 1
        while True:
            resp = await self._request(
                "GET", "", params={"per_page": PAGE_SIZE, "page": page}
            )
            body = resp.json()
            batch = body.get("secrets", [])
            refs.extend(ExistingSecretRef.model_validate(item) for item in batch)

            total = body.get("total_count", len(refs))
            if len(batch) < PAGE_SIZE or len(refs) >= total:
                break
            page += 1

        logger.debug("Fetched %d existing secrets.", len(refs))
        return refs

    async def upsert(self, name: str, ciphertext_b64: str, key_id: str) -> None:
        """Create or update a secret with an already sealed value.

        Raises:
            RemoteError: If the request fails.
        """
        await self._request(
            "PUT",
            _secret_path(name),
            json={"encrypted_value": ciphertext_b64, "key_id": key_id},
        )
        logger.info("Secret '%s' written.", name)

    async def delete(self, name: str) -> None:
        """Delete a secret.

        Raises:
            RemoteError: If the request fails.
        """
        await self._request("DELETE", _secret_path(name))
        logger.info("Secret '%s' deleted.", name)
