from __future__ import annotations

import logging
from datetime import datetime
from typing import Any
from urllib.parse import quote

import httpx
from google.auth.exceptions import GoogleAuthError
from google.auth.transport.requests import Request
from google.oauth2 import service_account

from receptionist.application.exceptions import CalendarUnavailable
from receptionist.application.ports.calendar import CalendarPort, EventRequest
from receptionist.core.config import settings
from receptionist.domain.entities.time_interval import TimeInterval

SCOPES = ["https://www.googleapis.com/auth/calendar"]
TOKEN_URI = "https://oauth2.googleapis.com/token"


def load_service_account_credentials(
    client_email: str | None = None,
    private_key: str | None = None,
    impersonate_user: str | None = None,
) -> service_account.Credentials:
    client_email = client_email or settings.GOOGLE_CLIENT_EMAIL
    private_key = private_key or settings.GOOGLE_PRIVATE_KEY
    impersonate_user = impersonate_user or settings.GOOGLE_IMPERSONATE_USER

    if not client_email or not private_key:
        raise ValueError("GOOGLE_CLIENT_EMAIL and GOOGLE_PRIVATE_KEY are required for Google Calendar")

    credentials = service_account.Credentials.from_service_account_info(
        {"client_email": client_email, "private_key": private_key, "token_uri": TOKEN_URI},
        scopes=SCOPES,
    )
    if impersonate_user:
        credentials = credentials.with_subject(impersonate_user)
    return credentials


class GoogleCalendar(CalendarPort):
    """Google Calendar v3 over REST: freeBusy for availability, events.insert for bookings."""

    def __init__(
        self,
        calendar_id: str | None = None,
        credentials: Any | None = None,
        base_url: str | None = None,
        timeout: float | None = None,
        client: httpx.Client | None = None,
    ) -> None:
        self._calendar_id = calendar_id or settings.CALENDAR_ID
        self._base_url = (base_url or settings.GOOGLE_CALENDAR_BASE_URL).rstrip("/")
        self._client = client or httpx.Client(timeout=timeout or settings.CALENDAR_TIMEOUT_SECONDS)
        self._logger = logging.getLogger(__name__)

        if not self._calendar_id:
            raise ValueError("CALENDAR_ID is required for Google Calendar")
        self._credentials = credentials or load_service_account_credentials()

    def query_busy(self, time_min: datetime, time_max: datetime, timezone: str) -> list[TimeInterval]:
        payload = {
            "timeMin": time_min.isoformat(),
            "timeMax": time_max.isoformat(),
            "timeZone": timezone,
            "items": [{"id": self._calendar_id}],
        }
        data = self._post("/freeBusy", payload, action="freebusy")

        calendar = (data.get("calendars") or {}).get(self._calendar_id)
        if calendar is None:
            raise CalendarUnavailable(f"Calendar {self._calendar_id} missing from freeBusy response")
        if calendar.get("errors"):
            reasons = ", ".join(str(error.get("reason")) for error in calendar["errors"])
            raise CalendarUnavailable(f"freeBusy reported errors: {reasons}")

        busy: list[TimeInterval] = []
        for entry in calendar.get("busy", []):
            try:
                busy.append(TimeInterval.from_iso(entry["start"], entry["end"]))
            except (KeyError, TypeError, ValueError) as e:
                # A busy block we cannot read must not be treated as free time.
                raise CalendarUnavailable(f"Malformed busy interval: {entry!r}") from e
        return busy

    def insert_event(self, request: EventRequest) -> str:
        payload = {
            "summary": request.summary,
            "description": request.description,
            "start": {"dateTime": request.start.isoformat(), "timeZone": request.timezone},
            "end": {"dateTime": request.end.isoformat(), "timeZone": request.timezone},
            "reminders": {"useDefault": True},
        }
        path = f"/calendars/{quote(self._calendar_id, safe='')}/events"
        data = self._post(path, payload, action="events-insert")

        event_id = data.get("id")
        if not event_id:
            raise CalendarUnavailable("No event ID returned from Google Calendar API")

        self._logger.info("Calendar event created", extra={"event_id": event_id})
        return str(event_id)

    def _post(self, path: str, payload: dict[str, Any], action: str) -> dict[str, Any]:
        try:
            response = self._client.post(f"{self._base_url}{path}", json=payload, headers=self._headers())
            response.raise_for_status()
            return response.json()
        except (httpx.HTTPError, GoogleAuthError, ValueError) as e:
            self._logger.error("Google Calendar request failed", extra={"action": action, "error": str(e)})
            raise CalendarUnavailable(f"Google Calendar {action} failed: {e}") from e

    def _headers(self) -> dict[str, str]:
        if not self._credentials.valid:
            self._credentials.refresh(Request())
        return {"Authorization": f"Bearer {self._credentials.token}", "Content-Type": "application/json"}
