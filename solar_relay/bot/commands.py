"""
Telegram command handling for the solar panel bot.

Commands are resolved synchronously into a ``BotReply`` so the
python-telegram-bot layer only has to deliver it. Every path, failures
included, ends in a reply the user can see.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from datetime import date, datetime, timezone

from solar_relay.core.errors import BadRequest, Unauthorized, UpstreamError
from solar_relay.models.telemetry import AuthFailure, Credential
from solar_relay.services.auth import AuthTokenProvider
from solar_relay.services.telemetry import TelemetryService, now_ms

logger = logging.getLogger(__name__)

BOT_COMMANDS: list[tuple[str, str]] = [
    ("start", "Start interacting with the bot"),
    ("help", "Get help using the bot"),
    ("status", "Get solar panel status"),
    ("export", "Export data"),
]

START_MESSAGE = "Hello! I'm your friendly bot. How can I assist you today?"
HELP_MESSAGE = (
    "Here are the commands you can use:\n"
    "/start - Start interacting with the bot\n"
    "/help - Get help using the bot\n"
    "/status - Get solar panel status\n"
    "/export - Export data\n\n"
    "optional: /export [start_date] [end_date], format: YYYY-MM-DD\n"
    "If no dates are provided, data from the last 24 hours will be exported."
)
UNKNOWN_MESSAGE = (
    "I'm sorry, I didn't understand that command. Type /help for a list of commands."
)
INVALID_START_DATE = "Invalid start date format. Please use YYYY-MM-DD."
INVALID_END_DATE = "Invalid end date format. Please use YYYY-MM-DD."
REVERSED_RANGE_MESSAGE = "Start date must not be after end date."
NO_DATA_MESSAGE = "No data available for the specified date range."
AUTH_FAILED_MESSAGE = (
    "Could not authenticate with the telemetry service. Please retry later."
)
UPSTREAM_FAILED_MESSAGE = (
    "The solar panel service is not responding right now. Please retry later."
)
GENERIC_FAILURE_MESSAGE = "Something went wrong while handling your request. Please retry later."

_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


@dataclass(frozen=True)
class BotReply:
    text: str | None = None
    document: bytes | None = None
    filename: str | None = None


def parse_day(value: str) -> date | None:
    """Strict ``YYYY-MM-DD``; anything else, including impossible dates, is None."""
    if not _DATE_RE.match(value):
        return None
    try:
        return datetime.strptime(value, "%Y-%m-%d").date()
    except ValueError:
        return None


class CommandDispatcher:
    def __init__(self, *, auth: AuthTokenProvider, telemetry: TelemetryService) -> None:
        self._auth = auth
        self._telemetry = telemetry

    def dispatch(self, text: str | None) -> BotReply:
        parts = (text or "").strip().split()
        command = parts[0].split("@", 1)[0].lower() if parts else ""
        args = parts[1:]

        try:
            if command == "/start":
                return BotReply(text=START_MESSAGE)
            if command == "/help":
                return BotReply(text=HELP_MESSAGE)
            if command == "/status":
                return self.status()
            if command == "/export":
                return self.export(args)
            return BotReply(text=UNKNOWN_MESSAGE)
        except BadRequest as e:
            return BotReply(text=e.message)
        except Unauthorized:
            return BotReply(text=AUTH_FAILED_MESSAGE)
        except UpstreamError as e:
            logger.error("Command %s failed upstream: %s", command, e.message)
            return BotReply(text=UPSTREAM_FAILED_MESSAGE)
        except Exception:  # noqa: BLE001 - every command must end in a reply
            logger.exception("Command %s failed", command)
            return BotReply(text=GENERIC_FAILURE_MESSAGE)

    def status(self) -> BotReply:
        credential = self._credential()
        status = self._telemetry.current_status(credential.auth_header)
        return BotReply(
            text=(
                "Solar Panel Status:\n"
                f"Voltage: {status.voltage:g}V\n"
                f"Current: {status.current:g}A\n"
                f"Power Output: {status.power:g}W\n"
                f"Temperature: {status.temperature:g}°C\n"
                f"Light Intensity: {status.light:g} lux"
            )
        )

    def export(self, args: list[str]) -> BotReply:
        start_arg = args[0] if len(args) > 0 else None
        end_arg = args[1] if len(args) > 1 else None

        # Dates are validated before authenticating so bad input never reaches upstream.
        if start_arg is not None and parse_day(start_arg) is None:
            raise BadRequest(INVALID_START_DATE)
        if end_arg is not None and parse_day(end_arg) is None:
            raise BadRequest(INVALID_END_DATE)

        start_ts = self._telemetry.day_bounds(start_arg)[0] if start_arg else None
        end_ts = self._telemetry.day_bounds(end_arg)[1] if end_arg else None
        if start_ts is not None and start_ts > (end_ts if end_ts is not None else now_ms()):
            raise BadRequest(REVERSED_RANGE_MESSAGE)

        credential = self._credential()
        filename = f"solar_panel_data_{datetime.now(tz=timezone.utc).date().isoformat()}.csv"
        export = self._telemetry.export_csv(
            credential.auth_header, start_ts=start_ts, end_ts=end_ts, filename=filename
        )
        if export.row_count == 0:
            return BotReply(text=NO_DATA_MESSAGE)
        return BotReply(document=export.content.encode("utf-8"), filename=export.filename)

    def _credential(self) -> Credential:
        result = self._auth.obtain_token()
        if isinstance(result, AuthFailure):
            raise Unauthorized(result.reason)
        return result.credential
