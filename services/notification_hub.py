# services/notification_hub.py
"""
Approval Notification Channel - per-tenant push of settlement changes.

One connection per tenant id. Subscribing again replaces the previous
connection. Delivery is at most once and best effort: if the tenant is not
connected, or the send fails or times out, the event is dropped and the
tenant's reconciliation poll picks up the change.

A connection is anything with an async ``send_json(data)`` method
(starlette's WebSocket, or QueueConnection for in-process listeners).
"""
import asyncio
import logging
import os
from typing import Any, Optional, Protocol

from dotenv import load_dotenv

from services.errors import DeliveryError

load_dotenv()

logger = logging.getLogger(__name__)

PUSH_TIMEOUT_SECONDS = float(os.getenv("PUSH_TIMEOUT_SECONDS", "5"))

PAYMENT_APPROVED = "paymentApproved"
PAYMENT_REJECTED = "paymentRejected"


class Connection(Protocol):
     async def send_json(self, data: Any) -> None: ...


class QueueConnection:
     """In-process connection: pushed events land on an asyncio queue."""

     def __init__(self, maxsize: int = 0):
          self.queue: asyncio.Queue = asyncio.Queue(maxsize=maxsize)

     async def send_json(self, data: Any) -> None:
          self.queue.put_nowait(data)

     async def receive_json(self) -> Any:
          return await self.queue.get()


class NotificationHub:
     """Publish/subscribe keyed by tenant id."""

     def __init__(self, send_timeout: float = PUSH_TIMEOUT_SECONDS):
          self.send_timeout = send_timeout
          self._connections: dict[int, Connection] = {}

     def subscribe(self, tenant_id: int, connection: Connection) -> None:
          previous = self._connections.get(tenant_id)
          self._connections[tenant_id] = connection
          if previous is None:
               logger.info("Tenant %s subscribed to payment events", tenant_id)
          elif previous is not connection:
               logger.info("Tenant %s re-registered with a new connection", tenant_id)

     def unsubscribe(self, tenant_id: int, connection: Optional[Connection] = None) -> None:
          """Drop a tenant's connection; with ``connection`` only if it is still the current one."""
          current = self._connections.get(tenant_id)
          if current is None:
               return
          if connection is not None and current is not connection:
               return
          del self._connections[tenant_id]
          logger.info("Tenant %s unsubscribed from payment events", tenant_id)

     def is_connected(self, tenant_id: int) -> bool:
          return tenant_id in self._connections

     async def _deliver(self, tenant_id: int, connection: Connection, message: dict) -> None:
          try:
               await asyncio.wait_for(connection.send_json(message), timeout=self.send_timeout)
          except asyncio.TimeoutError as e:
               raise DeliveryError(f"Push to tenant {tenant_id} timed out") from e
          except Exception as e:
               raise DeliveryError(f"Push to tenant {tenant_id} failed: {e}") from e

     async def publish(self, tenant_id: int, event: str, payload: dict) -> bool:
          """
          Send one event to one tenant.

          Returns:
               True if the event was handed to the tenant's connection
          """
          connection = self._connections.get(tenant_id)
          if connection is None:
               logger.debug("Tenant %s not connected; dropped %s", tenant_id, event)
               return False

          message = {"event": event, "payment": payload}
          try:
               await self._deliver(tenant_id, connection, message)
          except DeliveryError as e:
               logger.warning("%s; relying on polling", e.message)
               self.unsubscribe(tenant_id, connection)
               return False
          return True


hub = NotificationHub()


def get_notification_hub() -> NotificationHub:
     """FastAPI dependency for the process-wide hub."""
     return hub
