# services/settlement_watcher.py
"""
Settlement watcher - waits for a payment to reach a terminal state.

Two strategies run side by side behind one cancellable handle:

- PushStrategy: reads pushed events (paymentApproved / paymentRejected)
  for the watched payment from a connection with ``receive_json()``.
- PollStrategy: fetches the payment by id every ``interval`` seconds while
  it is still pending, so a lost push is noticed within one interval.

The first terminal record wins: ``on_settled`` is called once and both
strategies are cancelled. A payment that is already terminal when the
watcher starts is reported immediately and nothing is polled.
"""
import asyncio
import logging
import os
from typing import Any, Awaitable, Callable, Optional, Protocol

from dotenv import load_dotenv

from services.notification_hub import PAYMENT_APPROVED, PAYMENT_REJECTED

load_dotenv()

logger = logging.getLogger(__name__)

POLL_INTERVAL_SECONDS = float(os.getenv("POLL_INTERVAL_SECONDS", "5"))
POLL_TIMEOUT_SECONDS = float(os.getenv("API_TIMEOUT_SECONDS", "10"))

TERMINAL_STATUSES = frozenset({"successful", "failed"})
SETTLEMENT_EVENTS = frozenset({PAYMENT_APPROVED, PAYMENT_REJECTED})

Notify = Callable[[dict], None]


def is_terminal(payment: Optional[dict]) -> bool:
     return bool(payment) and payment.get("status") in TERMINAL_STATUSES


class PollingExhausted(Exception):
     """Raised by PollStrategy after ``max_failures`` consecutive fetch errors."""


class EventSource(Protocol):
     async def receive_json(self) -> Any: ...


class SettlementStrategy(Protocol):
     async def run(self, payment_id: int, notify: Notify) -> None: ...


class PushStrategy:
     """Listen for settlement events pushed to the tenant's connection."""

     def __init__(self, source: EventSource):
          self.source = source

     async def run(self, payment_id: int, notify: Notify) -> None:
          while True:
               message = await self.source.receive_json()
               if not isinstance(message, dict) or message.get("event") not in SETTLEMENT_EVENTS:
                    continue
               payment = message.get("payment")
               if not isinstance(payment, dict) or payment.get("id") != payment_id:
                    continue
               notify(payment)


class PollStrategy:
     """
     Re-query the payment on a fixed interval until it is terminal.

     Fetch errors are logged and retried on the next tick. With
     ``max_failures`` set, that many consecutive errors stop the strategy
     with PollingExhausted; by default it keeps trying.
     """

     def __init__(
          self,
          fetch: Callable[[int], Awaitable[dict]],
          interval: float = POLL_INTERVAL_SECONDS,
          timeout: float = POLL_TIMEOUT_SECONDS,
          max_failures: Optional[int] = None,
     ):
          self.fetch = fetch
          self.interval = interval
          self.timeout = timeout
          self.max_failures = max_failures
          self.requests = 0

     async def run(self, payment_id: int, notify: Notify) -> None:
          failures = 0
          while True:
               await asyncio.sleep(self.interval)
               self.requests += 1
               try:
                    payment = await asyncio.wait_for(self.fetch(payment_id), timeout=self.timeout)
               except Exception as e:
                    failures += 1
                    logger.warning("Approval check for payment %s failed (%d): %s", payment_id, failures, e)
                    if self.max_failures and failures >= self.max_failures:
                         raise PollingExhausted(
                              f"Gave up checking payment {payment_id} after {failures} failures"
                         ) from e
                    continue

               failures = 0
               if is_terminal(payment):
                    notify(payment)
                    return


class SettlementWatcher:
     """
     Watch one payment until settlement.

     Usage:
          watcher = SettlementWatcher(
               payment,
               [PushStrategy(connection), PollStrategy(client.fetch_payment)],
               on_settled=show_receipt,
          ).start()
          ...
          watcher.cancel()  # view torn down
     """

     def __init__(
          self,
          payment: dict,
          strategies: list,
          on_settled: Notify,
          on_error: Optional[Callable[[BaseException], None]] = None,
     ):
          self.payment = payment
          self.strategies = strategies
          self.on_settled = on_settled
          self.on_error = on_error
          self.settled = False
          self.cancelled = False
          self._tasks: list[asyncio.Task] = []
          self._done = asyncio.Event()

     @property
     def payment_id(self) -> int:
          return self.payment["id"]

     def start(self) -> "SettlementWatcher":
          if is_terminal(self.payment):
               self._notify(self.payment)
               return self
          for strategy in self.strategies:
               task = asyncio.create_task(strategy.run(self.payment_id, self._notify))
               task.add_done_callback(self._task_done)
               self._tasks.append(task)
          return self

     def cancel(self) -> None:
          self.cancelled = True
          for task in self._tasks:
               if not task.done():
                    task.cancel()
          self._done.set()

     async def wait(self, timeout: Optional[float] = None) -> Optional[dict]:
          """Wait until settled or cancelled; returns the terminal payment, if any."""
          await asyncio.wait_for(self._done.wait(), timeout=timeout)
          return self.payment if self.settled else None

     def _notify(self, payment: dict) -> None:
          if self.settled or self.cancelled or not is_terminal(payment):
               return
          self.settled = True
          self.payment = payment
          logger.info("Payment %s settled as %s", payment.get("id"), payment.get("status"))
          self.cancel()
          self.on_settled(payment)

     def _task_done(self, task: asyncio.Task) -> None:
          if task.cancelled():
               return
          error = task.exception()
          if error is not None:
               logger.warning("Settlement strategy for payment %s stopped: %s", self.payment_id, error)
               if self.on_error:
                    self.on_error(error)
          if not self.settled and all(t.done() for t in self._tasks):
               self._done.set()
