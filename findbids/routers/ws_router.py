import asyncio
import json
import logging
from fastapi import APIRouter, Depends, WebSocket, WebSocketDisconnect, status
from sqlmodel import Session

from ..config import settings
from ..persistence.database import get_session
from ..application.services.auth_service import AuthService
from ..infrastructure.persistence.sqlalchemy.repositories.user_repository_sql import SqlUserRepository
from ..infrastructure.persistence.sqlalchemy.repositories.session_repository_sql import SqlSessionRepository

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Realtime"])


async def _reject(websocket: WebSocket, reason: str) -> None:
    logger.warning(f"WebSocket rejected: {reason}")
    await websocket.close(code=status.WS_1008_POLICY_VIOLATION)


@router.websocket("/ws")
async def notifications_socket(websocket: WebSocket, session: Session = Depends(get_session)):
    """
    Realtime notification channel.

    The client sends ``{"type": "auth"}`` within ``WS_AUTH_TIMEOUT_SECONDS``;
    the user comes from the session cookie on the upgrade request. Any other
    frame before a successful auth, or no frame at all, closes the socket
    with 1008. Unauthenticated sockets are never registered.
    """
    hub = websocket.app.state.notification_hub
    await websocket.accept()
    user_id = None
    try:
        while True:
            if user_id is None:
                try:
                    raw = await asyncio.wait_for(websocket.receive_text(), timeout=settings.WS_AUTH_TIMEOUT_SECONDS)
                except asyncio.TimeoutError:
                    await _reject(websocket, "no auth message before timeout")
                    return
            else:
                raw = await websocket.receive_text()

            try:
                message = json.loads(raw)
            except ValueError:
                message = None
            msg_type = message.get("type") if isinstance(message, dict) else None

            if user_id is None:
                if msg_type != "auth":
                    await _reject(websocket, f"'{msg_type}' frame before auth")
                    return
                token = websocket.cookies.get(settings.SESSION_COOKIE_NAME)
                user = AuthService(SqlUserRepository(session), SqlSessionRepository(session)).resolve(token)
                # Release the pooled connection; the socket may stay open for hours
                session.close()
                if not user:
                    await _reject(websocket, "no valid session cookie")
                    return
                user_id = user.id
                hub.register(user_id, websocket)
                await websocket.send_json({"type": "auth_success"})
            elif msg_type == "auth":
                await websocket.send_json({"type": "auth_success"})
            elif msg_type == "ping":
                await websocket.send_json({"type": "pong"})
            elif message is None:
                logger.warning("Ignoring non-JSON WebSocket frame")
    except WebSocketDisconnect:
        logger.info(f"WebSocket disconnected for user {user_id}")
    finally:
        if user_id is not None:
            hub.unregister(user_id, websocket)
