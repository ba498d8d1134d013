"""Provider HTTP client.

This module keeps the HTTP handling for every odds provider in one place so
the rest of the application can focus on normalization and arbitrage
processing.
"""

from __future__ import annotations

import os
from typing import Any, Mapping, MutableMapping, Optional

import requests

from odds_client.catalog import ProviderInfo


class ProviderError(RuntimeError):
    """Raised when a provider returns a non-success status or an unreadable body."""


class ProviderClient:
    """Fetches raw odds snapshots from the catalogued providers."""

    def __init__(
        self,
        session: Optional[requests.Session] = None,
        timeout: float = 15,
        environ: Optional[Mapping[str, str]] = None,
    ) -> None:
        self._session = session or requests.Session()
        self._timeout = timeout
        self._environ = environ if environ is not None else os.environ

    def fetch(self, provider: ProviderInfo) -> Any:
        """Return the provider's parsed JSON payload.

        Raises ``ProviderError`` for HTTP failures and
        ``requests.RequestException`` for transport failures.
        """

        response = self._session.request(
            provider.method,
            provider.url,
            headers=self._headers(provider),
            json=provider.body,
            timeout=self._timeout,
        )
        if not 200 <= response.status_code < 300:
            raise ProviderError(
                f"{provider.title} request failed with status {response.status_code}: {response.text[:200]}"
            )
        try:
            return response.json()
        except ValueError as exc:
            raise ProviderError(f"{provider.title} returned a non-JSON body") from exc

    def _headers(self, provider: ProviderInfo) -> MutableMapping[str, str]:
        headers: MutableMapping[str, str] = dict(provider.headers)
        if provider.token_env and provider.token_header:
            token = self._environ.get(provider.token_env)
            if token:
                headers[provider.token_header] = f"{provider.token_prefix}{token}"
        return headers
