"""
Snapshot synchronization between a store and its readers.

Mutations go through a ``NotifyingRepository``, which re-lists the store
and puts an immutable ``Snapshot`` on a channel. A single
``SnapshotConsumer`` owns the current snapshot: it drains the channel,
keeps only the newest snapshot (last write wins), recomputes derived data
from scratch and hands the result to its subscribers.

Usage:
    ```
    channel = queue.Queue()
    repository = NotifyingRepository(JsonFileTransactionRepository(path), channel)
    consumer = SnapshotConsumer(channel, compute=lambda s: monthly_totals(s.transactions, 2024, 3))
    consumer.subscribe(print)

    repository.save(transaction)
    consumer.process_pending()
    ```
"""
import itertools
import queue
import threading
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Generic, List, Optional, Tuple, TypeVar

from finance_tracker.domain.models import Transaction
from finance_tracker.logging_setup import get_logger
from finance_tracker.repositories.base import TransactionRepository

logger = get_logger("finance_tracker.sync")

T = TypeVar("T")

Subscriber = Callable[[T], None]


@dataclass(frozen=True)
class Snapshot:
    """The full transaction collection at a point in time"""
    transactions: Tuple[Transaction, ...]
    version: int = 0
    taken_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc), compare=False)

    def __len__(self) -> int:
        return len(self.transactions)


class NotifyingRepository(TransactionRepository):
    """
    Repository decorator that publishes a fresh snapshot after every mutation.

    Reads are passed straight through to the wrapped repository.
    """

    def __init__(self, repository: TransactionRepository, channel: "queue.Queue[Snapshot]"):
        self.repository = repository
        self.channel = channel
        self._versions = itertools.count(1)
        self._lock = threading.Lock()

    def publish(self) -> Snapshot:
        """List the store and put the resulting snapshot on the channel"""
        with self._lock:
            snapshot = Snapshot(
                transactions=tuple(self.repository.list()),
                version=next(self._versions),
            )
            self.channel.put(snapshot)
        logger.debug("Published snapshot v%d (%d transactions)", snapshot.version, len(snapshot))
        return snapshot

    def save(self, transaction: Transaction) -> Transaction:
        saved = self.repository.save(transaction)
        self.publish()
        return saved

    def get_by_id(self, transaction_id: str) -> Optional[Transaction]:
        return self.repository.get_by_id(transaction_id)

    def list(self) -> List[Transaction]:
        return self.repository.list()

    def suggestion_lists(self) -> Dict[str, List[str]]:
        return self.repository.suggestion_lists()

    def update(self, transaction: Transaction) -> Transaction:
        updated = self.repository.update(transaction)
        self.publish()
        return updated

    def delete(self, transaction_id: str) -> bool:
        deleted = self.repository.delete(transaction_id)
        if deleted:
            self.publish()
        return deleted


class SnapshotConsumer(Generic[T]):
    """
    Single owner of the current snapshot.

    Each processed snapshot is passed to ``compute`` and the result is
    delivered to every subscriber. Subscribers only ever see results,
    never the mutable state behind them.
    """

    _STOP = object()

    def __init__(
        self,
        channel: "queue.Queue[Any]",
        compute: Callable[[Snapshot], T],
    ):
        self.channel = channel
        self.compute = compute
        self._snapshot: Optional[Snapshot] = None
        self._result: Optional[T] = None
        self._subscribers: List[Subscriber] = []
        self._lock = threading.Lock()
        self._thread: Optional[threading.Thread] = None

    @property
    def snapshot(self) -> Optional[Snapshot]:
        return self._snapshot

    @property
    def result(self) -> Optional[T]:
        """The most recently computed result"""
        return self._result

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        """
        Register a callback for new results.

        Returns:
            A function that removes the callback again
        """
        with self._lock:
            self._subscribers.append(callback)

        def unsubscribe() -> None:
            with self._lock:
                if callback in self._subscribers:
                    self._subscribers.remove(callback)

        return unsubscribe

    def accept(self, snapshot: Snapshot) -> bool:
        """
        Make ``snapshot`` current, recompute and publish.

        Snapshots older than the current one are ignored.

        Returns:
            True if the snapshot was applied
        """
        if self._snapshot is not None and snapshot.version < self._snapshot.version:
            logger.debug("Ignoring stale snapshot v%d", snapshot.version)
            return False

        self._snapshot = snapshot
        self._result = self.compute(snapshot)
        self._publish(self._result)
        return True

    def _publish(self, result: T) -> None:
        with self._lock:
            subscribers = list(self._subscribers)

        for callback in subscribers:
            try:
                callback(result)
            except Exception:
                logger.exception("Subscriber %r failed", callback)

    def _drain(self, latest: Optional[Snapshot] = None) -> Tuple[Optional[Snapshot], bool]:
        """Empty the channel, returning the newest snapshot and whether stop was requested"""
        stopped = False
        while True:
            try:
                item = self.channel.get_nowait()
            except queue.Empty:
                break
            if item is self._STOP:
                stopped = True
            elif isinstance(item, Snapshot) and (latest is None or item.version >= latest.version):
                latest = item
        return latest, stopped

    def process_pending(self) -> bool:
        """
        Drain the channel without blocking and apply the newest snapshot.

        Returns:
            True if a new snapshot was applied
        """
        latest, _ = self._drain()
        if latest is None:
            return False
        return self.accept(latest)

    def _run(self) -> None:
        while True:
            item = self.channel.get()
            first = item if isinstance(item, Snapshot) else None
            latest, stopped = self._drain(first)
            if latest is not None:
                try:
                    self.accept(latest)
                except Exception:
                    logger.exception("Failed to process snapshot v%d", latest.version)
            if stopped or item is self._STOP:
                break

    def start(self) -> None:
        """Consume snapshots on a background thread until ``stop()``"""
        if self._thread is not None:
            raise RuntimeError("Consumer already started")
        self._thread = threading.Thread(target=self._run, name="snapshot-consumer", daemon=True)
        self._thread.start()

    def stop(self, timeout: Optional[float] = None) -> None:
        if self._thread is None:
            return
        self.channel.put(self._STOP)
        self._thread.join(timeout)
        self._thread = None
