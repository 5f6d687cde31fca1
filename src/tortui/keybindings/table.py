"""Bindings table: one trie root per key mode."""

import logging
from collections.abc import Mapping
from types import MappingProxyType
from typing import Any, Iterator

from tortui.errors import ConfigError, KeyGrammarError
from tortui.keybindings.chords import parse_key_sequence
from tortui.keybindings.modes import KeyMode
from tortui.keybindings.tree import BindingNode, BindingValue, add_binding

logger = logging.getLogger(__name__)


DEFAULT_KEYBINDINGS: dict[str, dict[str, Any]] = {
    "TorrentList": {
        "<q>": {"action": "Quit", "description": "Quit"},
        "<Ctrl-c>": {"action": "Quit", "description": "Quit"},
        "<Ctrl-a>": {"description": "Add"},
        "<Ctrl-a><t>": {"action": "AddTorrent", "description": "Add torrent"},
    },
    "AddTorrent": {
        "<esc>": {"action": "Back", "description": "Back to torrent list"},
        "<Ctrl-c>": {"action": "Quit", "description": "Quit"},
    },
}


class KeyBindings(Mapping):
    """Read-only mapping of key mode to the root of its bindings trie.

    Built once from configuration. Reloading configuration builds a new
    table instead of changing this one.
    """

    def __init__(self, roots: Mapping[KeyMode, BindingNode] | None = None):
        self._roots = MappingProxyType(dict(roots or {}))

    @classmethod
    def from_config(cls, raw: Mapping[str, Any]) -> "KeyBindings":
        """Build the table from the ``keybindings`` configuration section.

        Args:
            raw: Mode name -> {sequence string -> binding value}. Within a
                mode, later entries for the same sequence win.

        Raises:
            KeyGrammarError: If a sequence string cannot be parsed.
            ConfigError: If a mode name, action name or binding value is
                invalid.
        """
        if not isinstance(raw, Mapping):
            raise ConfigError(f"keybindings must be a mapping, got {raw!r}")

        roots: dict[KeyMode, BindingNode] = {}
        for mode_name, entries in raw.items():
            mode = KeyMode.from_name(mode_name)
            if not isinstance(entries, Mapping):
                raise ConfigError(
                    f"Bindings for key mode {mode_name} must be a mapping"
                )

            root = roots.setdefault(mode, BindingNode())
            for sequence, value in entries.items():
                if not isinstance(sequence, str):
                    raise ConfigError(f"Key sequence must be text: {sequence!r}")
                chords = parse_key_sequence(sequence)
                if not chords:
                    raise KeyGrammarError(
                        f"Empty key sequence in key mode {mode_name}", sequence
                    )
                try:
                    binding = BindingValue.from_raw(value)
                except ConfigError as e:
                    raise ConfigError(
                        f"Invalid binding `{sequence}` in key mode {mode_name}: {e}"
                    ) from e
                add_binding(root, chords, binding)

            logger.debug(f"Loaded {len(entries)} bindings for key mode {mode.value}")

        return cls(roots)

    def __getitem__(self, mode: KeyMode) -> BindingNode:
        return self._roots[mode]

    def __iter__(self) -> Iterator[KeyMode]:
        return iter(self._roots)

    def __len__(self) -> int:
        return len(self._roots)

    def __repr__(self) -> str:
        modes = ", ".join(mode.value for mode in self._roots)
        return f"KeyBindings([{modes}])"
