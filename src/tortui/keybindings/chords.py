"""Key events, chords and the chord sequence grammar.

A chord sequence is written as one or more ``<...>`` segments, for example
``<Ctrl-a><t>``. Inside a segment any number of ``ctrl-``, ``alt-`` and
``shift-`` prefixes (case-insensitive, any order) precede the key name.
"""

from dataclasses import dataclass
from enum import Enum, Flag, auto
from typing import Iterable, Union

from tortui.errors import KeyGrammarError


class KeyCode(Enum):
    """Named (non-character) keys."""

    ESC = "esc"
    ENTER = "enter"
    LEFT = "left"
    RIGHT = "right"
    UP = "up"
    DOWN = "down"
    HOME = "home"
    END = "end"
    PAGE_UP = "pageup"
    PAGE_DOWN = "pagedown"
    BACK_TAB = "backtab"
    BACKSPACE = "backspace"
    DELETE = "delete"
    INSERT = "insert"
    TAB = "tab"
    F1 = "f1"
    F2 = "f2"
    F3 = "f3"
    F4 = "f4"
    F5 = "f5"
    F6 = "f6"
    F7 = "f7"
    F8 = "f8"
    F9 = "f9"
    F10 = "f10"
    F11 = "f11"
    F12 = "f12"


class Modifiers(Flag):
    """Modifier keys held during a key press."""

    NONE = 0
    CTRL = auto()
    ALT = auto()
    SHIFT = auto()


class KeyEventKind(Enum):
    """Whether a key went down, auto-repeated or went up."""

    PRESS = "press"
    REPEAT = "repeat"
    RELEASE = "release"


# A key is either a named key or a single character.
Key = Union[KeyCode, str]


@dataclass(frozen=True)
class KeyEvent:
    """Raw key event as delivered by the terminal layer."""

    key: Key
    modifiers: Modifiers = Modifiers.NONE
    kind: KeyEventKind = KeyEventKind.PRESS


# Key names accepted by the grammar besides single characters.
KEY_NAMES: dict[str, Key] = {code.value: code for code in KeyCode}
KEY_NAMES.update({"space": " ", "hyphen": "-", "minus": "-"})

# Character keys rendered by name instead of the bare character.
CHAR_NAMES = {" ": "space", "-": "hyphen"}

MODIFIER_PREFIXES = (
    ("ctrl-", Modifiers.CTRL),
    ("alt-", Modifiers.ALT),
    ("shift-", Modifiers.SHIFT),
)

MODIFIER_LABELS = (
    (Modifiers.CTRL, "Ctrl"),
    (Modifiers.ALT, "Alt"),
    (Modifiers.SHIFT, "Shift"),
)


@dataclass(frozen=True)
class Chord:
    """Canonical identity of one key press.

    Build chords with :meth:`of` or :meth:`from_key_event`; both apply the
    same normalization so that chords parsed from configuration and chords
    derived from terminal events compare equal:

    - shift on a character key is folded into the character
      (``Shift-q`` and ``Q`` are the same chord);
    - backtab always carries shift, and shift-tab is backtab.
    """

    key: Key
    modifiers: Modifiers = Modifiers.NONE

    @classmethod
    def of(cls, key: Key, modifiers: Modifiers = Modifiers.NONE) -> "Chord":
        """Create a normalized chord."""
        if isinstance(key, str):
            if Modifiers.SHIFT in modifiers:
                key = key.upper()
            if len(key) != 1:
                raise ValueError(f"Character key must be one character: {key!r}")
            return cls(key, modifiers & ~Modifiers.SHIFT)

        if key is KeyCode.TAB and Modifiers.SHIFT in modifiers:
            key = KeyCode.BACK_TAB
        if key is KeyCode.BACK_TAB:
            modifiers |= Modifiers.SHIFT
        return cls(key, modifiers)

    @classmethod
    def from_key_event(cls, event: KeyEvent) -> "Chord":
        """Canonicalize a terminal key event."""
        try:
            return cls.of(event.key, event.modifiers)
        except ValueError:
            # No single-character upper case (e.g. "ß"), nothing can bind it
            return cls(event.key, event.modifiers)

    def __str__(self) -> str:
        parts = [
            label
            for flag, label in MODIFIER_LABELS
            if flag in self.modifiers
            and not (flag is Modifiers.SHIFT and self.key is KeyCode.BACK_TAB)
        ]
        if isinstance(self.key, KeyCode):
            parts.append(self.key.value)
        else:
            parts.append(CHAR_NAMES.get(self.key, self.key))
        return "<" + "-".join(parts) + ">"


def parse_key_sequence(raw: str) -> list[Chord]:
    """Parse a chord sequence string such as ``<Ctrl-a><t>``.

    Args:
        raw: Sequence string from the configuration.

    Returns:
        Chords in the order they must be pressed. Empty only for an
        empty string.

    Raises:
        KeyGrammarError: On a missing ``<``, an unclosed ``<`` or an
            unknown key name. The message names ``raw``.
    """
    chords = []
    remaining = raw

    while remaining:
        if not remaining.startswith("<"):
            raise KeyGrammarError(
                f"Expected '<' at start of key segment in `{raw}`", raw
            )
        end = remaining.find(">", 1)
        if end == -1:
            raise KeyGrammarError(f"Unclosed '<' in `{raw}`", raw)
        chords.append(parse_chord(remaining[1:end], raw))
        remaining = remaining[end + 1 :]

    return chords


def parse_chord(segment: str, raw: str | None = None) -> Chord:
    """Parse the inside of one ``<...>`` segment.

    Args:
        segment: Text between the angle brackets, e.g. ``Ctrl-Alt-a``.
        raw: Full sequence string, used in error messages.

    Raises:
        KeyGrammarError: If the key name is not recognized.
    """
    raw = segment if raw is None else raw
    name, modifiers = _extract_modifiers(segment)

    if len(name) == 1 and name.isprintable():
        try:
            return Chord.of(name, modifiers)
        except ValueError:
            raise KeyGrammarError(
                f"Unable to parse key `{segment}` in `{raw}`", raw
            ) from None

    key = KEY_NAMES.get(name.lower())
    if key is None:
        raise KeyGrammarError(f"Unable to parse key `{segment}` in `{raw}`", raw)
    return Chord.of(key, modifiers)


def _extract_modifiers(segment: str) -> tuple[str, Modifiers]:
    """Strip leading modifier prefixes, returning the key name and flags."""
    modifiers = Modifiers.NONE
    current = segment

    while True:
        lowered = current.lower()
        for prefix, flag in MODIFIER_PREFIXES:
            # "ctrl--" is Ctrl plus the hyphen key, keep the last "-"
            if lowered.startswith(prefix) and len(current) > len(prefix):
                modifiers |= flag
                current = current[len(prefix) :]
                break
        else:
            return current, modifiers


def format_key_sequence(chords: Iterable[Chord]) -> str:
    """Render chords back into the sequence grammar."""
    return "".join(str(chord) for chord in chords)
