"""MoySklad JSON API client (remap 1.2).

Implements the three collaborators a reconciliation run needs:
- fetch_payments(): incoming payments (paymentin)
- fetch_unpaid_candidates(expand): every sales invoice (invoiceout); unpaid
  filtering is done by the matching core
- send_entity(entity_type, records): batch create-or-update

Usage:

    with MoyskladClient(token=os.environ["PAYLINK_TOKEN"]) as client:
        report = reconcile(client, client, attribute, sender=client)

No retries here. Failures surface as CollaboratorFetchError (reads) or
SendError (writes) so the caller can retry the whole batch.
"""

from __future__ import annotations

import logging
import os
from typing import Any, Dict, Iterable, Iterator

import httpx

from paylink.errors import CollaboratorFetchError, ConfigurationError, SendError

DEFAULT_API_URL = "https://api.moysklad.ru/api/remap/1.2"
DEFAULT_PAGE_SIZE = 100  # API maximum when expand is used
MAX_ERROR_DETAIL_CHARS = 500
PAYMENT_EXPAND = ("organizationAccount", "agent")

log = logging.getLogger(__name__)


def token_from_env(env_var: str) -> str:
    token = os.environ.get(env_var)
    if not token:
        raise ConfigurationError(f"{env_var} environment variable is required")
    return token


class MoyskladClient:
    """Synchronous client; use as a context manager to release the connection pool."""

    def __init__(
        self,
        token: str,
        base_url: str = DEFAULT_API_URL,
        page_size: int = DEFAULT_PAGE_SIZE,
        timeout: float = 60.0,
        transport: httpx.BaseTransport | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.page_size = page_size
        self._client = httpx.Client(
            base_url=self.base_url,
            timeout=timeout,
            transport=transport,
            headers={
                "Authorization": f"Bearer {token}",
                "Accept-Encoding": "gzip",
                "Content-Type": "application/json",
            },
        )

    def __enter__(self) -> "MoyskladClient":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def close(self) -> None:
        self._client.close()

    def get_entity_rows(self, entity: str, expand: Iterable[str] | None = None) -> Iterator[dict]:
        """Yield every row of an entity collection, following offset pagination."""
        offset = 0
        params: Dict[str, Any] = {"limit": self.page_size}
        if expand:
            params["expand"] = ",".join(expand)
        while True:
            params["offset"] = offset
            data = self._get(f"/entity/{entity}", params)
            rows = data.get("rows")
            if not isinstance(rows, list):
                raise CollaboratorFetchError(f"{entity}: response has no 'rows' list")
            yield from rows
            if len(rows) < self.page_size:
                return
            offset += len(rows)

    def fetch_payments(self) -> list[dict]:
        rows = list(self.get_entity_rows("paymentin", expand=PAYMENT_EXPAND))
        log.debug("Fetched %d paymentin rows", len(rows))
        return rows

    def fetch_unpaid_candidates(self, expand: Iterable[str]) -> list[dict]:
        rows = list(self.get_entity_rows("invoiceout", expand=expand))
        log.debug("Fetched %d invoiceout rows", len(rows))
        return rows

    def send_entity(self, entity_type: str, records: Dict[str, dict]) -> list[dict]:
        if not records:
            raise ValueError(f"Refusing to send an empty {entity_type} batch")
        payload = list(records.values())
        try:
            response = self._client.post(f"/entity/{entity_type}", json=payload)
        except httpx.HTTPError as e:
            raise SendError(entity_type, f"{type(e).__name__}: {e}") from e
        if response.status_code >= 400:
            raise SendError(
                entity_type,
                f"status {response.status_code}: {response.text[:MAX_ERROR_DETAIL_CHARS]}",
            )
        return response.json() if response.content else []

    def _get(self, path: str, params: Dict[str, Any]) -> dict:
        try:
            response = self._client.get(path, params=params)
        except httpx.HTTPError as e:
            raise CollaboratorFetchError(f"GET {path}: {type(e).__name__}: {e}") from e
        if response.status_code >= 400:
            raise CollaboratorFetchError(
                f"GET {path}: status {response.status_code}: "
                f"{response.text[:MAX_ERROR_DETAIL_CHARS]}"
            )
        try:
            return response.json()
        except ValueError as e:
            raise CollaboratorFetchError(f"GET {path}: invalid JSON") from e


__all__ = ["MoyskladClient", "DEFAULT_API_URL", "token_from_env"]
