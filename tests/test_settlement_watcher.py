"""Test settlement_watcher -- push and poll strategies racing to settlement."""
import asyncio

import pytest

from services.notification_hub import PAYMENT_APPROVED, QueueConnection
from services.settlement_watcher import (
    PollingExhausted,
    PollStrategy,
    PushStrategy,
    SettlementWatcher,
)

PENDING = {"id": 7, "status": "pending"}
SUCCESSFUL = {"id": 7, "status": "successful"}


def scripted_fetch(*responses):
    """Fetch that returns (or raises) the given responses, repeating the last."""
    remaining = list(responses)

    async def fetch(payment_id):
        item = remaining.pop(0) if len(remaining) > 1 else remaining[0]
        if isinstance(item, Exception):
            raise item
        return item

    return fetch


class TestPollStrategy:

    async def test_stops_after_terminal(self):
        poll = PollStrategy(scripted_fetch(PENDING, PENDING, SUCCESSFUL), interval=0.01, timeout=1)
        settled = []
        watcher = SettlementWatcher(PENDING, [poll], on_settled=settled.append).start()

        assert await watcher.wait(timeout=2) == SUCCESSFUL
        await asyncio.sleep(0.05)
        assert settled == [SUCCESSFUL]
        assert poll.requests == 3

    async def test_fetch_errors_are_retried(self):
        poll = PollStrategy(scripted_fetch(RuntimeError("offline"), SUCCESSFUL), interval=0.01, timeout=1)
        watcher = SettlementWatcher(PENDING, [poll], on_settled=lambda p: None).start()
        assert await watcher.wait(timeout=2) == SUCCESSFUL

    async def test_max_failures_reports_error(self):
        errors = []
        poll = PollStrategy(
            scripted_fetch(RuntimeError("offline")), interval=0.01, timeout=1, max_failures=2
        )
        watcher = SettlementWatcher(
            PENDING, [poll], on_settled=lambda p: None, on_error=errors.append
        ).start()

        assert await watcher.wait(timeout=2) is None
        assert poll.requests == 2
        assert isinstance(errors[0], PollingExhausted)


class TestSettlementWatcher:

    async def test_already_terminal_makes_no_requests(self):
        poll = PollStrategy(scripted_fetch(SUCCESSFUL), interval=0.01)
        settled = []
        watcher = SettlementWatcher(SUCCESSFUL, [poll], on_settled=settled.append).start()

        assert await watcher.wait(timeout=1) == SUCCESSFUL
        assert settled == [SUCCESSFUL]
        assert poll.requests == 0

    async def test_push_wins_and_cancels_polling(self):
        connection = QueueConnection()
        poll = PollStrategy(scripted_fetch(PENDING), interval=10)
        settled = []
        watcher = SettlementWatcher(
            PENDING, [PushStrategy(connection), poll], on_settled=settled.append
        ).start()

        await connection.send_json({"event": "paymentApproved", "payment": {"id": 8, "status": "successful"}})
        await connection.send_json({"event": PAYMENT_APPROVED, "payment": SUCCESSFUL})

        assert await watcher.wait(timeout=1) == SUCCESSFUL
        assert settled == [SUCCESSFUL]
        assert poll.requests == 0

    async def test_malformed_push_payload_is_skipped(self):
        connection = QueueConnection()
        settled = []
        watcher = SettlementWatcher(
            PENDING, [PushStrategy(connection)], on_settled=settled.append
        ).start()

        await connection.send_json({"event": PAYMENT_APPROVED, "payment": "7"})
        await connection.send_json({"event": PAYMENT_APPROVED, "payment": [7]})
        await connection.send_json({"event": PAYMENT_APPROVED, "payment": SUCCESSFUL})

        assert await watcher.wait(timeout=1) == SUCCESSFUL
        assert settled == [SUCCESSFUL]

    async def test_cancel_stops_everything(self):
        poll = PollStrategy(scripted_fetch(PENDING), interval=0.01, timeout=1)
        settled = []
        watcher = SettlementWatcher(PENDING, [poll], on_settled=settled.append).start()
        await asyncio.sleep(0.05)
        watcher.cancel()
        count = poll.requests

        await asyncio.sleep(0.05)
        assert await watcher.wait(timeout=1) is None
        assert poll.requests == count
        assert settled == []
