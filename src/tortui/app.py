"""Application shell - ties the event stream to the key matcher."""

import logging
from typing import Callable, Optional

from tortui.config import Config
from tortui.errors import ModeNotFoundError
from tortui.events import EventMultiplexer, InputSource, KeyPressEvent, TickEvent
from tortui.keybindings import Action, KeyBindings, KeyMode, Matcher

logger = logging.getLogger(__name__)


class App:
    """Consumes events and acts on the actions they fire.

    Responsibilities:
    - Feed key presses to the matcher
    - Quit on ``Quit``
    - Switch key mode on ``AddTorrent`` / ``Back``
    - Call the refresh hook every ``update_torrent_list_interval`` seconds
    """

    def __init__(
        self,
        config: Config,
        bindings: KeyBindings,
        source: InputSource,
        on_refresh: Optional[Callable[[], None]] = None,
    ):
        """Initialize the application.

        Args:
            config: Application configuration.
            bindings: Bindings table built from ``config``.
            source: Raw terminal input.
            on_refresh: Called when the torrent list is due for a refresh.

        Raises:
            ModeNotFoundError: If the default key mode has no bindings.
        """
        self._config = config
        self._matcher = Matcher(bindings)
        self._events = EventMultiplexer(
            source,
            tick_interval=config.tick_interval,
            queue_size=config.event_queue_size,
        )
        self._on_refresh = on_refresh
        self._ticks_per_refresh = max(
            1, round(config.update_torrent_list_interval / config.tick_interval)
        )
        self._should_quit = False

    @property
    def matcher(self) -> Matcher:
        """Key matcher, owned by the event consumer."""
        return self._matcher

    @property
    def events(self) -> EventMultiplexer:
        """Event stream feeding the application."""
        return self._events

    @property
    def should_quit(self) -> bool:
        """Whether a quit has been requested."""
        return self._should_quit

    async def run(self) -> None:
        """Process events until quit or until the stream ends."""
        self._events.start()
        logger.info(f"Application started in key mode {self._matcher.mode.value}")
        try:
            while not self._should_quit:
                event = await self._events.next_event()
                if event is None:
                    logger.info("Event stream ended")
                    break
                if isinstance(event, KeyPressEvent):
                    self.handle_key(event)
                elif isinstance(event, TickEvent):
                    self.handle_tick(event)
        finally:
            await self._events.stop()
        logger.info("Application stopped")

    def handle_key(self, event: KeyPressEvent) -> None:
        """Resolve a key press and act on the fired action, if any."""
        action = self._matcher.on_key(event.key)
        if action is not None:
            self.handle_action(action)

    def handle_tick(self, event: TickEvent) -> None:
        """Trigger a torrent list refresh when one is due."""
        if event.count % self._ticks_per_refresh == 0 and self._on_refresh:
            try:
                self._on_refresh()
            except Exception as e:
                logger.error(f"Torrent list refresh failed: {e}")

    def handle_action(self, action: Action) -> None:
        """Carry out an action fired by the matcher."""
        if action is Action.QUIT:
            self._should_quit = True
            self._events.cancel()
        elif action is Action.ADD_TORRENT:
            self._switch_mode(KeyMode.ADD_TORRENT)
        elif action is Action.BACK:
            self._switch_mode(KeyMode.TORRENT_LIST)

    def _switch_mode(self, mode: KeyMode) -> None:
        try:
            self._matcher.set_mode(mode)
        except ModeNotFoundError as e:
            logger.warning(str(e))
