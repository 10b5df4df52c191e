"""HTTP gateway to the per-category knowledge endpoints."""

from __future__ import annotations

import json
from typing import Any

import httpx
from loguru import logger

from zap_agent.routing.categories import (
    CATEGORY_TABLE,
    DomainCategory,
    KnowledgeRecord,
    Scalar,
)


def _to_scalar(value: Any) -> Scalar:
    if value is None or isinstance(value, (str, int, float, bool)):
        return value
    return json.dumps(value, ensure_ascii=False)


def normalize_payload(data: Any) -> list[KnowledgeRecord]:
    """Coerce a decoded JSON body into ordered scalar records."""
    if isinstance(data, dict):
        data = [data]
    if not isinstance(data, list):
        raise ValueError(f"expected a list of records, got {type(data).__name__}")
    records: list[KnowledgeRecord] = []
    for item in data:
        if not isinstance(item, dict):
            continue
        records.append({str(key): _to_scalar(value) for key, value in item.items()})
    return records


class KnowledgeGateway:
    """
    Fetch records for a category from `{base_url}{endpoint}`.

    Any failure (connection error, timeout, non-2xx status, malformed body)
    is logged and yields an empty list.
    """

    def __init__(
        self,
        base_url: str = "http://localhost:3000",
        endpoints: dict[str, str] | None = None,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport
        self.endpoints: dict[DomainCategory, str] = {
            category: profile.endpoint
            for category, profile in CATEGORY_TABLE.items()
            if profile.endpoint
        }
        for name, path in (endpoints or {}).items():
            category = DomainCategory.parse(name)
            if category is DomainCategory.DEFAULT:
                logger.warning(f"Ignoring knowledge endpoint for unknown category: {name}")
                continue
            self.endpoints[category] = path

    def url_for(self, category: DomainCategory) -> str | None:
        path = self.endpoints.get(category)
        if not path:
            return None
        return f"{self.base_url}/{path.lstrip('/')}"

    async def fetch_records(self, category: DomainCategory) -> list[KnowledgeRecord]:
        """Read the records for a category; empty on any failure."""
        url = self.url_for(category)
        if not url:
            return []

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.get(url)
                response.raise_for_status()
                records = normalize_payload(response.json())
        except httpx.HTTPStatusError as e:
            logger.warning(f"Knowledge endpoint {url} returned {e.response.status_code}")
            return []
        except (httpx.HTTPError, httpx.InvalidURL, ValueError) as e:
            logger.warning(f"Knowledge fetch failed for {category.value} ({url}): {e}")
            return []

        logger.debug(f"Fetched {len(records)} {category.value} record(s) from {url}")
        return records
