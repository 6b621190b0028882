"""Notification dispatcher that schedules reminders on OneSignal.

Each call submits exactly one notification with ``send_after`` set to the
reminder time and ``external_id`` set to the deduplication key. Failures
are reported in the outcome and never raised, so one rejected reminder
does not stop the others.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Optional

import httpx

from agenda_ccb.reminders.reminder_planner import ReminderInstruction
from agenda_ccb.utils.date_parser import to_utc_iso
from agenda_ccb.utils.logger import log_info, log_error, log_debug


DEFAULT_API_URL = "https://onesignal.com/api/v1/notifications"


@dataclass(frozen=True)
class DispatchOutcome:
    """Result of one submission."""
    success: bool
    dedup_key: str
    send_at: datetime
    status_code: Optional[int] = None
    response: Dict[str, Any] = field(default_factory=dict)


def decode_response(response: httpx.Response) -> Dict[str, Any]:
    """Decode a JSON object body, falling back to ``{}``."""
    if not response.content:
        return {}
    try:
        data = response.json()
    except ValueError:
        return {}
    return data if isinstance(data, dict) else {"data": data}


class NotificationDispatcher:
    """Submits reminder instructions to the notification service."""

    def __init__(
        self,
        app_id: str,
        rest_api_key: str,
        api_url: str = DEFAULT_API_URL,
        language: str = "pt",
        segment: str = "Subscribed Users",
        timeout_seconds: float = 30.0,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        """Initialize the dispatcher.

        Args:
            app_id: OneSignal application id
            rest_api_key: OneSignal REST API key
            api_url: Notification creation endpoint
            language: Key used for the localized heading and content
            segment: Audience segment that receives every reminder
            timeout_seconds: Timeout of the owned HTTP client
            http_client: Client to use instead of creating one
        """
        self.app_id = app_id
        self.rest_api_key = rest_api_key
        self.api_url = api_url
        self.language = language
        self.segment = segment
        self._owns_http_client = http_client is None
        self._http_client = http_client or httpx.AsyncClient(timeout=timeout_seconds)

        log_debug("NotificationDispatcher initialized")

    def build_payload(self, instruction: ReminderInstruction) -> Dict[str, Any]:
        payload = {
            "app_id": self.app_id,
            "headings": {self.language: instruction.title},
            "contents": {self.language: instruction.message},
            "included_segments": [self.segment],
            "send_after": to_utc_iso(instruction.send_at),
            "external_id": instruction.dedup_key,
        }
        if instruction.url:
            payload["url"] = instruction.url
        return payload

    def _headers(self) -> Dict[str, str]:
        return {
            "Content-Type": "application/json; charset=utf-8",
            "Authorization": f"Basic {self.rest_api_key}",
        }

    async def send(self, instruction: ReminderInstruction) -> DispatchOutcome:
        """Submit one reminder.

        Args:
            instruction: Reminder to schedule

        Returns:
            Outcome with success decided by the response status alone
        """
        send_after = to_utc_iso(instruction.send_at)

        try:
            response = await self._http_client.post(
                self.api_url,
                json=self.build_payload(instruction),
                headers=self._headers(),
            )
        except httpx.HTTPError as e:
            log_error(f"Erro ao criar notificação: {instruction.dedup_key} ({e})")
            return DispatchOutcome(
                success=False,
                dedup_key=instruction.dedup_key,
                send_at=instruction.send_at,
            )

        data = decode_response(response)
        if not response.is_success:
            log_error(f"Erro ao criar notificação: {instruction.dedup_key} {response.status_code} {data}")
            return DispatchOutcome(
                success=False,
                dedup_key=instruction.dedup_key,
                send_at=instruction.send_at,
                status_code=response.status_code,
                response=data,
            )

        log_info(f"OK: {instruction.dedup_key} -> {send_after}")
        return DispatchOutcome(
            success=True,
            dedup_key=instruction.dedup_key,
            send_at=instruction.send_at,
            status_code=response.status_code,
            response=data,
        )

    async def aclose(self) -> None:
        """Close the HTTP client if this dispatcher created it."""
        if self._owns_http_client:
            await self._http_client.aclose()

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.aclose()
