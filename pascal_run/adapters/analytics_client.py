from __future__ import annotations

import hashlib
import logging
import time
import uuid
from typing import Any, Dict, Optional

import httpx

from pascal_run.config.ini_config import AnalyticsSettings

logger = logging.getLogger(__name__)

ANALYTICS_ENDPOINT = "https://www.google-analytics.com/mp/collect"
ANALYTICS_TIMEOUT_SECONDS = 5.0


def machine_client_id() -> str:
    """Stable, anonymous per-machine id."""
    return hashlib.sha256(str(uuid.getnode()).encode("utf-8")).hexdigest()[:32]


def build_event_payload(client_id: str, event_name: str, params: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    return {
        "client_id": client_id,
        "events": [
            {
                "name": event_name,
                "params": {
                    "engagement_time_msec": "100",
                    "session_id": int(time.time() * 1000),
                    **(params or {}),
                },
            }
        ],
    }


class AnalyticsClient:
    """
    Usage events, posted fire-and-forget. The response is never inspected;
    callers wrap send_event in a NonCriticalOperation.
    """

    def __init__(self, settings: AnalyticsSettings, client_id: Optional[str] = None, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.settings = settings
        self.client_id = client_id or machine_client_id()
        self._transport = transport

    @property
    def enabled(self) -> bool:
        return self.settings.configured

    async def send_event(self, event_name: str, params: Optional[Dict[str, Any]] = None) -> bool:
        if not self.enabled:
            logger.debug("Analytics disabled, dropping %s", event_name)
            return False

        payload = build_event_payload(self.client_id, event_name, params)
        query = {"measurement_id": self.settings.measurement_id, "api_secret": self.settings.api_secret}

        async with httpx.AsyncClient(timeout=ANALYTICS_TIMEOUT_SECONDS, transport=self._transport) as client:
            await client.post(ANALYTICS_ENDPOINT, params=query, json=payload)
        return True
