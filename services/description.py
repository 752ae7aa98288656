"""Description suggestions for a task title.

The remote suggestion endpoint is a nice-to-have: whenever it is
unreachable or answers with anything but a description, the local template
table is used instead.
"""
from __future__ import annotations

from typing import Optional

import httpx

from core.log import get_logger
from core.settings import API
from services.inference import synthesize_description


class DescriptionService:
    def __init__(
        self,
        url: Optional[str] = None,
        *,
        client: Optional[httpx.Client] = None,
        timeout: Optional[float] = None,
        enabled: bool = True,
    ) -> None:
        self.url = url or f"{API.base_url.rstrip('/')}{API.describe_path}"
        self.client = client or httpx.Client(timeout=timeout or API.timeout_sec)
        self.enabled = enabled
        self.logger = get_logger("description")

    def suggest(self, title: str) -> str:
        if not title or not title.strip():
            raise ValueError("Please enter a task title first")
        text = title.strip()
        if self.enabled:
            remote = self._fetch(text)
            if remote:
                return remote
        return synthesize_description(text)

    def _fetch(self, title: str) -> Optional[str]:
        try:
            response = self.client.post(self.url, json={"title": title})
        except httpx.HTTPError as exc:
            self.logger.warning("Description service unreachable, using local templates: %s", exc)
            return None
        if not response.is_success:
            self.logger.warning(
                "Description service answered %s, using local templates", response.status_code
            )
            return None
        try:
            body = response.json()
        except ValueError:
            self.logger.warning("Description service returned invalid JSON")
            return None
        description = body.get("description") if isinstance(body, dict) else None
        if not isinstance(description, str) or not description.strip():
            self.logger.warning("Description service returned no description")
            return None
        return description.strip()


__all__ = ["DescriptionService"]
