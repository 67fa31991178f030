import logging
from datetime import date

from fastapi import APIRouter, Depends

from auth import CurrentUser, get_current_user
from clock import get_today
from config import UPCOMING_WINDOW_DAYS
from errors import UpstreamError
from services.notification_service import NotificationService, SessionNotifier, get_session_notifier

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/notifications", tags=["Notifications"])


@router.get("")
async def list_notifications(
    user: CurrentUser = Depends(get_current_user),
    today: date = Depends(get_today),
    notifier: SessionNotifier = Depends(get_session_notifier),
):
    """Alerts not yet shown in this session (budget exceeded, upcoming scheduled)."""
    try:
        return NotificationService.collect(user.db, user.id, user.session_key, today,
                                           UPCOMING_WINDOW_DAYS, notifier)
    except UpstreamError as e:
        logger.error(f"Error collecting notifications: {e}")
        raise UpstreamError("Could not fetch the notifications.") from e
