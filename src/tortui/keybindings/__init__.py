"""Chord keybindings: grammar, per-mode trie and matcher."""

from tortui.keybindings.actions import Action
from tortui.keybindings.chords import (
    Chord,
    KeyCode,
    KeyEvent,
    KeyEventKind,
    Modifiers,
    format_key_sequence,
    parse_chord,
    parse_key_sequence,
)
from tortui.keybindings.matcher import Matcher
from tortui.keybindings.modes import KeyMode
from tortui.keybindings.table import DEFAULT_KEYBINDINGS, KeyBindings
from tortui.keybindings.tree import BindingNode, BindingValue, add_binding

__all__ = [
    # Actions and modes
    "Action",
    "KeyMode",
    # Grammar
    "Chord",
    "KeyCode",
    "KeyEvent",
    "KeyEventKind",
    "Modifiers",
    "format_key_sequence",
    "parse_chord",
    "parse_key_sequence",
    # Trie
    "BindingNode",
    "BindingValue",
    "add_binding",
    # Table
    "DEFAULT_KEYBINDINGS",
    "KeyBindings",
    # Matcher
    "Matcher",
]
