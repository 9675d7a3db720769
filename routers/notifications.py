# routers/notifications.py
"""
WebSocket endpoint of the approval notification channel.

Connect with ``/ws/payments?token=<jwt>``. The connection is registered
under the token's user id; a ``registerTenant`` message re-registers it
and is refused for any other tenant id.
"""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, WebSocket, WebSocketDisconnect, status
from jose import JWTError

from dependencies import decode_token
from services.notification_hub import NotificationHub, get_notification_hub

logger = logging.getLogger(__name__)

router = APIRouter(tags=["notifications"])


@router.websocket("/ws/payments")
async def payment_events(
     websocket: WebSocket,
     token: Optional[str] = Query(None),
     hub: NotificationHub = Depends(get_notification_hub),
):
     try:
          ctx = decode_token(token or "")
     except JWTError:
          await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
          return

     await websocket.accept()
     hub.subscribe(ctx.user_id, websocket)
     try:
          while True:
               try:
                    message = await websocket.receive_json()
               except ValueError:
                    await websocket.send_json({"event": "error", "error": "Messages must be JSON"})
                    continue

               if not isinstance(message, dict) or message.get("event") != "registerTenant":
                    continue
               if str(message.get("tenantId")) != str(ctx.user_id):
                    await websocket.send_json({"event": "error", "error": "Not authorized for this tenant"})
                    continue
               hub.subscribe(ctx.user_id, websocket)
               await websocket.send_json({"event": "registered", "tenantId": ctx.user_id})
     except WebSocketDisconnect:
          logger.debug("Tenant %s disconnected", ctx.user_id)
     finally:
          hub.unsubscribe(ctx.user_id, websocket)
