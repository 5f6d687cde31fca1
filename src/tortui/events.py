"""Event multiplexer merging terminal input, ticks and shutdown."""

import asyncio
import logging
from dataclasses import dataclass
from typing import Optional, Protocol, Union

from tortui.keybindings import KeyEvent, KeyEventKind

logger = logging.getLogger(__name__)

DEFAULT_QUEUE_SIZE = 32


# ============================================================================
# Raw terminal events
# ============================================================================


@dataclass(frozen=True)
class ResizeEvent:
    """Terminal window changed size."""

    cols: int
    rows: int


@dataclass(frozen=True)
class FocusEvent:
    """Terminal window gained or lost focus."""

    gained: bool


RawEvent = Union[KeyEvent, ResizeEvent, FocusEvent]


class InputSource(Protocol):
    """Protocol for raw terminal input."""

    async def read(self) -> Optional[RawEvent]:
        """Wait for the next raw event.

        Returns None once input is exhausted. Raises on read failure.
        """
        ...


# ============================================================================
# Application events
# ============================================================================


@dataclass(frozen=True)
class Event:
    """Base class for events delivered to the application."""

    pass


@dataclass(frozen=True)
class KeyPressEvent(Event):
    """A key was pressed."""

    key: KeyEvent


@dataclass(frozen=True)
class TickEvent(Event):
    """Periodic timer fired."""

    count: int


class Ticker:
    """Fixed-rate timer that does not drift with how late it is awaited.

    Missed ticks are skipped rather than delivered in a burst.
    """

    def __init__(self, interval: float):
        if interval <= 0:
            raise ValueError(f"Tick interval must be positive: {interval}")
        self._interval = interval
        self._deadline: Optional[float] = None
        self._count = 0

    @property
    def interval(self) -> float:
        """Seconds between ticks."""
        return self._interval

    async def wait(self) -> int:
        """Sleep until the next tick.

        Returns:
            Number of ticks delivered so far, this one included.
        """
        loop = asyncio.get_running_loop()
        if self._deadline is None:
            self._deadline = loop.time() + self._interval

        await asyncio.sleep(max(0.0, self._deadline - loop.time()))

        self._deadline += self._interval
        now = loop.time()
        if self._deadline <= now:
            self._deadline = now + self._interval
        self._count += 1
        return self._count


class EventMultiplexer:
    """Single-consumer stream of key presses and ticks.

    A producer task waits on whichever of cancellation, the ticker or the
    input source is ready first and forwards key presses and ticks into a
    bounded queue. A full queue suspends the producer.

    The producer stops when cancelled, when the consumer closes the
    stream, or when the input source fails or runs dry. None of these
    raise to the consumer: ``next_event()`` returns None once the producer
    has stopped and the queue is drained.

    Usage:
        events = EventMultiplexer(source, tick_interval=0.25)
        events.start()
        while (event := await events.next_event()) is not None:
            # Handle event
        await events.stop()
    """

    def __init__(
        self,
        source: InputSource,
        tick_interval: float = 0.25,
        queue_size: int = DEFAULT_QUEUE_SIZE,
    ):
        """Initialize the multiplexer.

        Args:
            source: Raw terminal input.
            tick_interval: Seconds between tick events.
            queue_size: Maximum number of undelivered events.
        """
        self._source = source
        self._ticker = Ticker(tick_interval)
        self._queue: asyncio.Queue[Event] = asyncio.Queue(maxsize=queue_size)
        self._cancelled = asyncio.Event()
        self._closed = asyncio.Event()
        self._task: Optional[asyncio.Task] = None

    @property
    def is_running(self) -> bool:
        """Whether the producer task is alive."""
        return self._task is not None and not self._task.done()

    @property
    def is_cancelled(self) -> bool:
        """Whether cancel() has been called."""
        return self._cancelled.is_set()

    def start(self) -> None:
        """Start the producer task. Must be called from a running loop."""
        if self._task is not None:
            return
        self._task = asyncio.create_task(self._produce())
        logger.debug(
            f"Event multiplexer started (tick={self._ticker.interval}s, "
            f"queue={self._queue.maxsize})"
        )

    def cancel(self) -> None:
        """Ask the producer to stop. Safe to call more than once."""
        self._cancelled.set()

    def close(self) -> None:
        """Drop the consumer side; the producer stops on its next send."""
        self._closed.set()
        while not self._queue.empty():
            self._queue.get_nowait()

    async def join(self) -> None:
        """Wait for the producer task to finish."""
        if self._task is not None:
            await asyncio.shield(self._task)

    async def stop(self) -> None:
        """Cancel the producer and wait for it to finish."""
        self.cancel()
        if self._task:
            try:
                await self._task
            except asyncio.CancelledError:
                pass
        logger.debug("Event multiplexer stopped")

    async def next_event(self) -> Optional[Event]:
        """Wait for the next event.

        Returns:
            The next event in production order, or None once the producer
            has stopped and no events are left.
        """
        if self._closed.is_set():
            return None
        if not self._queue.empty():
            return self._queue.get_nowait()
        if not self.is_running:
            return None

        getter = asyncio.ensure_future(self._queue.get())
        try:
            await asyncio.wait(
                {getter, self._task}, return_when=asyncio.FIRST_COMPLETED
            )
        finally:
            if not getter.done():
                getter.cancel()

        if getter.done() and not getter.cancelled():
            return getter.result()
        if not self._queue.empty():
            return self._queue.get_nowait()
        return None

    async def _produce(self) -> None:
        """Producer loop."""
        cancelled = asyncio.ensure_future(self._cancelled.wait())
        closed = asyncio.ensure_future(self._closed.wait())
        tick: Optional[asyncio.Future] = None
        read: Optional[asyncio.Future] = None

        try:
            while not self._cancelled.is_set():
                if tick is None:
                    tick = asyncio.ensure_future(self._ticker.wait())
                if read is None:
                    read = asyncio.ensure_future(self._source.read())

                await asyncio.wait(
                    {cancelled, closed, tick, read},
                    return_when=asyncio.FIRST_COMPLETED,
                )

                if cancelled.done():
                    break
                if closed.done():
                    logger.debug("Event consumer closed, stopping producer")
                    break

                if tick.done():
                    count = tick.result()
                    tick = None
                    if not await self._send(TickEvent(count), cancelled, closed):
                        break

                if read.done():
                    finished, read = read, None
                    try:
                        raw = finished.result()
                    except Exception as e:
                        logger.warning(f"Terminal input failed: {e}")
                        break
                    if raw is None:
                        logger.debug("Terminal input exhausted")
                        break
                    if not self._accepts(raw):
                        continue
                    if not await self._send(KeyPressEvent(raw), cancelled, closed):
                        break
        finally:
            # A read that failed while cancel or close won the same wait
            if read is not None and read.done() and not read.cancelled():
                error = read.exception()
                if error is not None:
                    logger.warning(f"Terminal input failed: {error}")
            for future in (cancelled, closed, tick, read):
                if future is not None and not future.done():
                    future.cancel()

    @staticmethod
    def _accepts(raw: RawEvent) -> bool:
        """Only key presses reach the consumer."""
        return isinstance(raw, KeyEvent) and raw.kind is KeyEventKind.PRESS

    async def _send(
        self,
        event: Event,
        cancelled: asyncio.Future,
        closed: asyncio.Future,
    ) -> bool:
        """Enqueue an event, waiting for room.

        Returns:
            False if cancellation or consumer close won the race.
        """
        if self._cancelled.is_set() or self._closed.is_set():
            return False
        if not self._queue.full():
            self._queue.put_nowait(event)
            return True

        put = asyncio.ensure_future(self._queue.put(event))
        try:
            await asyncio.wait(
                {put, cancelled, closed}, return_when=asyncio.FIRST_COMPLETED
            )
        finally:
            if not put.done():
                put.cancel()
        return put.done() and not put.cancelled()
