"""
Change feed for the blood_inventory table.

``InventoryChangeFeed`` fires its subscribers once per committed transaction
that touched a ``BloodInventory`` row. Notifications carry no payload:
subscribers re-read whatever they need. ``InventoryMonitor`` is the standard
subscriber; it rebuilds the enriched inventory view on every notification.

The session hooks only see ORM flushes made in this process. Writes from
other processes, other workers, raw SQL or bulk ``Query.update()``/``delete()``
are picked up by ``InventoryPoller``, which compares the table contents on a
fixed interval and fires the same feed when they differ.
"""
import asyncio
import logging
import threading
from datetime import datetime, timezone
from itertools import chain
from typing import Callable, ContextManager, List, Optional, Tuple

from sqlalchemy import event

from bloodbank.core.exceptions import DataStoreUnavailable
from bloodbank.models.blood_inventory import BloodInventory
from bloodbank.schemas.inventory import InventoryWithRequests, StockLevel
from bloodbank.services.availability import get_blood_inventory_with_requests
from bloodbank.services.data_store import BloodBankStore

logger = logging.getLogger(__name__)

_CHANGED_FLAG = "blood_inventory_changed"


class InventoryChangeFeed:
    """Subscription point for "blood_inventory changed" notifications."""

    def __init__(self):
        self._subscribers: List[Callable[[], None]] = []
        self._lock = threading.Lock()
        self._target = None

    def subscribe(self, callback: Callable[[], None]) -> Callable[[], None]:
        """Register ``callback``; returns a function that unsubscribes it."""
        with self._lock:
            self._subscribers.append(callback)

        def unsubscribe():
            with self._lock:
                if callback in self._subscribers:
                    self._subscribers.remove(callback)

        return unsubscribe

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    def notify(self) -> None:
        with self._lock:
            subscribers = list(self._subscribers)
        for callback in subscribers:
            try:
                callback()
            except Exception as e:
                # One broken subscriber must not starve the others
                logger.error(f"Inventory change subscriber {callback!r} failed: {e}")

    # SQLAlchemy session hooks

    def attach(self, target) -> None:
        """Watch sessions created from ``target`` (a sessionmaker, Session class or session)."""
        if self._target is not None:
            self.detach()
        event.listen(target, "after_flush", self._after_flush)
        event.listen(target, "after_commit", self._after_commit)
        event.listen(target, "after_rollback", self._after_rollback)
        self._target = target
        logger.info("Inventory change feed attached")

    def detach(self) -> None:
        if self._target is None:
            return
        event.remove(self._target, "after_flush", self._after_flush)
        event.remove(self._target, "after_commit", self._after_commit)
        event.remove(self._target, "after_rollback", self._after_rollback)
        self._target = None

    def _after_flush(self, session, flush_context):
        # new/dirty/deleted still hold the pre-flush state here
        if any(
            isinstance(obj, BloodInventory)
            for obj in chain(session.new, session.dirty, session.deleted)
        ):
            session.info[_CHANGED_FLAG] = True

    def _after_commit(self, session):
        if session.info.pop(_CHANGED_FLAG, False):
            self.notify()

    def _after_rollback(self, session):
        session.info.pop(_CHANGED_FLAG, None)


class InventoryMonitor:
    """Keeps the latest enriched inventory view, recomputed on each change."""

    def __init__(
        self,
        feed: InventoryChangeFeed,
        store_factory: Callable[[], ContextManager[BloodBankStore]],
        on_refresh: Optional[Callable[[List[InventoryWithRequests]], None]] = None,
    ):
        self.feed = feed
        self.store_factory = store_factory
        self.on_refresh = on_refresh
        self.snapshot: List[InventoryWithRequests] = []
        self.refreshed_at: Optional[datetime] = None
        self._unsubscribe: Optional[Callable[[], None]] = None

    def start(self) -> None:
        if self._unsubscribe is None:
            self._unsubscribe = self.feed.subscribe(self.refresh)
        self.refresh()

    def stop(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    def refresh(self) -> None:
        """Rebuild the view from scratch; a failed read keeps the previous snapshot."""
        try:
            with self.store_factory() as store:
                snapshot = get_blood_inventory_with_requests(store)
        except DataStoreUnavailable as e:
            logger.error(f"Inventory refresh failed, keeping previous snapshot: {e}")
            return
        self.snapshot = snapshot
        self.refreshed_at = datetime.now(timezone.utc)
        if self.on_refresh is not None:
            self.on_refresh(snapshot)


InventoryFingerprint = Tuple[Tuple[str, int, Optional[int], Optional[datetime]], ...]


class InventoryPoller:
    """Fires the feed when blood_inventory changed behind the ORM's back."""

    def __init__(
        self,
        feed: InventoryChangeFeed,
        store_factory: Callable[[], ContextManager[BloodBankStore]],
        poll_interval: float = 5.0,
    ):
        self.feed = feed
        self.store_factory = store_factory
        self.poll_interval = poll_interval
        self.running = False
        self._fingerprint: Optional[InventoryFingerprint] = None

    def _read_fingerprint(self) -> InventoryFingerprint:
        with self.store_factory() as store:
            records = store.list_all_blood_type_records()
        return tuple(
            (record.blood_type, record.quantity, record.capacity, record.updated_at)
            for record in records
        )

    def check(self) -> bool:
        """Read the table once; notify and return True if it differs from the last read."""
        try:
            fingerprint = self._read_fingerprint()
        except DataStoreUnavailable as e:
            logger.error(f"Inventory poll failed: {e}")
            return False

        previous, self._fingerprint = self._fingerprint, fingerprint
        if previous is None or previous == fingerprint:
            return False

        logger.info("blood_inventory changed since last poll, notifying subscribers")
        self.feed.notify()
        return True

    async def start(self):
        """Poll until ``stop()`` is called; the first read only records a baseline."""
        self.running = True
        logger.info(f"Starting inventory poller (poll_interval={self.poll_interval}s)")
        try:
            while self.running:
                await asyncio.to_thread(self.check)
                await asyncio.sleep(self.poll_interval)
        except asyncio.CancelledError:
            logger.info("Inventory poller cancelled")

    def stop(self):
        self.running = False


def log_stock_alerts(snapshot: List[InventoryWithRequests]) -> None:
    """Warn about every blood type whose stock is critical."""
    for item in snapshot:
        if item.stock_level == StockLevel.CRITICAL:
            logger.warning(
                f"Critical stock for {item.blood_type}: {item.quantity} unit(s), "
                f"{item.stock_percentage:.0f}% of capacity, {item.pending_requests} unit(s) requested"
            )
