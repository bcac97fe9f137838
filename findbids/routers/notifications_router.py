from typing import List
from fastapi import APIRouter, Depends, Query
import logging

from ..application.ports.notification_repo import NotificationDto
from ..application.ports.user_repo import UserDto
from ..application.services.notification_service import NotificationService
from ..dependencies import get_current_user, get_notification_service
from ..schemas import NotificationResponse, UnreadCountResponse, MarkAllReadResponse, MessageResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/notifications", tags=["Notifications"])


def notification_response(n: NotificationDto) -> NotificationResponse:
    return NotificationResponse(**n.to_payload())


@router.get("", response_model=List[NotificationResponse])
def get_notifications(
    unread_only: bool = Query(False),
    limit: int = Query(50, ge=1, le=100),
    offset: int = Query(0, ge=0),
    current_user: UserDto = Depends(get_current_user),
    service: NotificationService = Depends(get_notification_service),
):
    notifications = service.list_for_user(current_user.id, unread_only=unread_only, limit=limit, offset=offset)
    return [notification_response(n) for n in notifications]


@router.get("/unread-count", response_model=UnreadCountResponse)
def get_unread_count(
    current_user: UserDto = Depends(get_current_user),
    service: NotificationService = Depends(get_notification_service),
):
    return UnreadCountResponse(count=service.unread_count(current_user.id))


@router.patch("/read-all", response_model=MarkAllReadResponse)
def mark_all_notifications_read(
    current_user: UserDto = Depends(get_current_user),
    service: NotificationService = Depends(get_notification_service),
):
    updated = service.mark_all_read(current_user.id)
    return MarkAllReadResponse(updated=updated)


@router.patch("/{notification_id}/read", response_model=MessageResponse)
def mark_notification_read(
    notification_id: int,
    current_user: UserDto = Depends(get_current_user),
    service: NotificationService = Depends(get_notification_service),
):
    service.mark_read(current_user.id, notification_id)
    return MessageResponse(message="Notification marked as read")


@router.delete("/{notification_id}", response_model=MessageResponse)
def delete_notification(
    notification_id: int,
    current_user: UserDto = Depends(get_current_user),
    service: NotificationService = Depends(get_notification_service),
):
    service.delete(current_user.id, notification_id)
    logger.info(f"User {current_user.id} deleted notification {notification_id}")
    return MessageResponse(message="Notification deleted")
