import asyncio
from datetime import datetime, timedelta, timezone

import pytest

from cardo.client import NotificationMerger
from cardo.errors import NetworkError, NotFoundError
from cardo.models.domain import Notification


class FakeClock:
    def __init__(self) -> None:
        self.now = 0.0

    def __call__(self) -> float:
        return self.now


def _durable(notification_id: str, minutes_ago: int = 0, read: bool = False) -> Notification:
    return Notification(
        id=notification_id,
        title="Order Request Accepted",
        message="Your request was accepted.",
        type="success",
        icon="🎉",
        created_at=datetime.now(timezone.utc) - timedelta(minutes=minutes_ago),
        read=read,
        recipient="anita@example.com",
    )


def test_merged_feed_has_unique_ids_newest_first() -> None:
    merger = NotificationMerger()
    merger.replace_durable([_durable("n1", minutes_ago=5), _durable("n2", minutes_ago=1), _durable("n1", minutes_ago=5)])
    toast = merger.success("Saved", "Draft saved")

    feed = merger.merge()

    assert [item.id for item in feed] == [toast.id, "n2", "n1"]
    assert len({item.id for item in feed}) == len(feed)


def test_replace_durable_drops_entries_missing_from_fetch() -> None:
    merger = NotificationMerger()
    merger.replace_durable([_durable("n1"), _durable("n2")])

    merger.replace_durable([_durable("n2")])

    assert [item.id for item in merger.merge()] == ["n2"]


def test_unread_count_matches_merged_feed() -> None:
    merger = NotificationMerger()
    merger.replace_durable([_durable("n1"), _durable("n2", read=True)])
    merger.info("Heads up", "Polling resumed")

    assert merger.unread_count == sum(1 for item in merger.merge() if not item.read) == 2


def test_ephemeral_entries_expire_unless_pinned() -> None:
    clock = FakeClock()
    merger = NotificationMerger(ttl=10, clock=clock)
    transient = merger.success("Saved", "Request updated")
    pinned = merger.error("Failed", "Try again", auto_remove=False)

    clock.now = 9.9
    assert {item.id for item in merger.merge()} == {transient.id, pinned.id}
    clock.now = 10.0
    assert [item.id for item in merger.merge()] == [pinned.id]


def test_ephemeral_ids_are_local_and_unique() -> None:
    merger = NotificationMerger()

    ids = {merger.info("t", "m").id for _ in range(5)}

    assert len(ids) == 5
    assert all(notification_id.startswith("local-") for notification_id in ids)


def test_mark_read_durable_waits_for_store() -> None:
    calls: list[str] = []

    async def remote(notification_id: str) -> None:
        calls.append(notification_id)

    async def scenario() -> None:
        merger = NotificationMerger(remote)
        merger.replace_durable([_durable("n1")])

        await merger.mark_read("n1")
        # A stale fetch that still says unread must not resurrect the entry.
        merger.replace_durable([_durable("n1")])

        assert calls == ["n1"]
        assert merger.unread_count == 0

    asyncio.run(scenario())


def test_mark_read_failure_leaves_entry_unread() -> None:
    async def remote(notification_id: str) -> None:
        raise NetworkError("offline")

    async def scenario() -> None:
        merger = NotificationMerger(remote)
        merger.replace_durable([_durable("n1")])

        with pytest.raises(NetworkError):
            await merger.mark_read("n1")

        assert merger.unread_count == 1

    asyncio.run(scenario())


def test_mark_read_unknown_id_raises_not_found() -> None:
    async def scenario() -> None:
        with pytest.raises(NotFoundError):
            await NotificationMerger().mark_read("missing")

    asyncio.run(scenario())


def test_mark_all_read_reports_partial_failures() -> None:
    async def remote(notification_id: str) -> None:
        if notification_id == "n2":
            raise NetworkError("timeout")

    async def scenario() -> None:
        merger = NotificationMerger(remote)
        merger.replace_durable([_durable("n1"), _durable("n2"), _durable("n3")])
        toast = merger.info("Welcome", "Hello")

        failed = await merger.mark_all_read()

        assert failed == ["n2"]
        assert merger.get(toast.id).read is True
        assert [item.id for item in merger.merge() if not item.read] == ["n2"]

    asyncio.run(scenario())


def test_mark_read_times_out() -> None:
    async def remote(notification_id: str) -> None:
        await asyncio.sleep(1)

    async def scenario() -> None:
        merger = NotificationMerger(remote, mark_read_timeout=0.01)
        merger.replace_durable([_durable("n1")])

        assert await merger.mark_all_read() == ["n1"]
        assert merger.unread_count == 1

    asyncio.run(scenario())


def test_remove_and_clear() -> None:
    merger = NotificationMerger()
    merger.replace_durable([_durable("n1"), _durable("n2")])
    toast = merger.warning("Careful", "Stale data")

    merger.remove("n1")
    assert {item.id for item in merger.merge()} == {"n2", toast.id}

    merger.clear()
    assert merger.merge() == []


def test_second_fetch_reflects_read_state_changed_on_server() -> None:
    merger = NotificationMerger()
    merger.replace_durable([_durable("n1"), _durable("n2", minutes_ago=3)])
    assert merger.unread_count == 2

    merger.replace_durable([_durable("n1", read=True), _durable("n2", minutes_ago=3)])

    entries = [item for item in merger.merge() if item.id == "n1"]
    assert len(entries) == 1
    assert entries[0].read is True
    assert merger.unread_count == 1
