from __future__ import annotations

import queue
import threading
from typing import TYPE_CHECKING, TypeVar

from catls.logging import logger

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator

T = TypeVar("T")

DEFAULT_BUFFER_SIZE = 64

# How often a blocked producer checks whether the consumer has gone away.
PUT_POLL_SECONDS = 0.1

_DONE = object()


def buffered(items: Iterable[T], *, maxsize: int = DEFAULT_BUFFER_SIZE) -> Iterator[T]:
    """Pull `items` on a producer thread and hand them over through a bounded queue.

    The producer blocks while the queue is full and the consumer while it is empty,
    so a slow sink throttles the walk. Order is preserved. An exception raised by the
    producer is re-raised in the consumer once every item produced before it has
    been handed over. If the consumer stops early, the producer is told to stop and
    exits at its next hand-off.

    Args:
        items (Iterable[T]): the sequence to consume, typically a walker generator
        maxsize (int): queue bound, at least 1

    Yields:
        Iterator[T]: the items of `items`, in order
    """
    channel: queue.Queue[object] = queue.Queue(maxsize=max(1, maxsize))
    failures: list[BaseException] = []
    stop = threading.Event()

    def hand_over(item: object) -> bool:
        while not stop.is_set():
            try:
                channel.put(item, timeout=PUT_POLL_SECONDS)
            except queue.Full:
                continue
            return True
        return False

    def produce() -> None:
        try:
            for item in items:
                if not hand_over(item):
                    return
        except Exception as e:  # noqa: BLE001
            failures.append(e)
        finally:
            hand_over(_DONE)

    worker = threading.Thread(target=produce, name="catls-walker", daemon=True)
    worker.start()
    try:
        while True:
            item = channel.get()
            if item is _DONE:
                break
            yield item  # type: ignore[misc]
    finally:
        stop.set()
    worker.join()
    if failures:
        logger.error("producer failed", error=str(failures[0]))
        raise failures[0]
