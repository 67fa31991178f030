from datetime import date
from zoneinfo import ZoneInfoNotFoundError

from fastapi import Request

from config import APP_TIMEZONE
from errors import ValidationError
from services.transaction_service import today_in


def get_today(request: Request) -> date:
    """FastAPI dependency — today's date in the caller's zone (X-Timezone) or APP_TIMEZONE."""
    zone = request.headers.get("X-Timezone") or APP_TIMEZONE
    try:
        return today_in(zone)
    except (ZoneInfoNotFoundError, ValueError, OSError):
        # OSError covers names that resolve to a tzdata directory, e.g. "America"
        raise ValidationError(f"Unknown time zone: {zone}")
