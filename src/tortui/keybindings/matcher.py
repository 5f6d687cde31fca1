"""Chord sequence matcher state machine."""

import logging
from typing import Optional

from tortui.errors import ModeNotFoundError
from tortui.keybindings.actions import Action
from tortui.keybindings.chords import Chord, KeyEvent, format_key_sequence
from tortui.keybindings.modes import KeyMode
from tortui.keybindings.table import KeyBindings
from tortui.keybindings.tree import BindingNode

logger = logging.getLogger(__name__)


class Matcher:
    """Resolves key events against the active mode's bindings trie.

    The matcher sits either at the root of the active mode or somewhere
    inside a sequence. Each key event moves it exactly once:

    - the key leads to a leaf: the leaf's action fires, back to root;
    - the key leads to a node with children: move there, nothing fires;
    - the key leads nowhere: back to root, nothing fires.

    A node with children never fires on its own, even when it was bound to
    an action; that action is only shown in hints.

    Usage:
        matcher = Matcher(bindings)
        action = matcher.on_key(event)
        if action is not None:
            # Handle action
    """

    def __init__(self, bindings: KeyBindings, mode: KeyMode | None = None):
        """Initialize the matcher at the root of ``mode``.

        Args:
            bindings: Bindings table, not modified by the matcher.
            mode: Initial key mode, defaults to ``KeyMode.default()``.

        Raises:
            ModeNotFoundError: If ``mode`` has no bindings.
        """
        mode = KeyMode.default() if mode is None else mode
        self._bindings = bindings
        self._mode = mode
        self._root = self._lookup(bindings, mode)
        self._current = self._root
        self._pending: list[Chord] = []

    @property
    def mode(self) -> KeyMode:
        """Active key mode."""
        return self._mode

    @property
    def bindings(self) -> KeyBindings:
        """Bindings table in use."""
        return self._bindings

    @property
    def at_root(self) -> bool:
        """Whether no sequence is in progress."""
        return self._current is self._root

    @property
    def pending(self) -> tuple[Chord, ...]:
        """Chords pressed so far in the sequence in progress."""
        return tuple(self._pending)

    def on_key(self, event: KeyEvent) -> Optional[Action]:
        """Advance the state machine by one key event.

        Args:
            event: The key event to resolve.

        Returns:
            The action of the leaf reached, or None when the sequence is
            still in progress or the key matched nothing.
        """
        chord = Chord.from_key_event(event)
        node = self._current.get(chord)

        if node is None:
            if not self.at_root:
                logger.debug(
                    f"No binding for {format_key_sequence(self._pending)}{chord}, "
                    "resetting"
                )
            self.reset()
            return None

        if node.is_leaf:
            sequence = format_key_sequence([*self._pending, chord])
            self.reset()
            if node.action is Action.NO_OP:
                logger.debug(f"Sequence {sequence} is bound to no action")
            else:
                logger.debug(f"Sequence {sequence} fired {node.action.value}")
            return node.action

        self._current = node
        self._pending.append(chord)
        return None

    def set_mode(self, mode: KeyMode) -> None:
        """Switch to another key mode, dropping any sequence in progress.

        Raises:
            ModeNotFoundError: If ``mode`` has no bindings. The matcher is
                left unchanged.
        """
        root = self._lookup(self._bindings, mode)
        self._mode = mode
        self._root = root
        self._current = root
        self._pending.clear()
        logger.debug(f"Key mode switched to {mode.value}")

    def replace_bindings(self, bindings: KeyBindings) -> None:
        """Swap in a reloaded bindings table.

        The active mode is kept and the matcher returns to its root.

        Raises:
            ModeNotFoundError: If the new table lacks the active mode. The
                matcher keeps the old table.
        """
        root = self._lookup(bindings, self._mode)
        self._bindings = bindings
        self._root = root
        self._current = root
        self._pending.clear()

    def reset(self) -> None:
        """Return to the root of the active mode."""
        self._current = self._root
        self._pending.clear()

    def hints(self) -> list[tuple[Chord, Optional[str], Action]]:
        """Chords that continue from the current position.

        Returns:
            (chord, description, action) for each outgoing chord, in
            configuration order.
        """
        return [
            (chord, node.description, node.action)
            for chord, node in self._current.children.items()
        ]

    @staticmethod
    def _lookup(bindings: KeyBindings, mode: KeyMode) -> BindingNode:
        root = bindings.get(mode)
        if root is None:
            raise ModeNotFoundError(mode, bindings.keys())
        return root
