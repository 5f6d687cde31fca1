"""Terminal input backed by blessed."""

import asyncio
import contextlib
import logging
from typing import Iterator, Optional

from blessed import Terminal
from blessed.keyboard import Keystroke

from tortui.events import RawEvent, ResizeEvent
from tortui.keybindings import KeyCode, KeyEvent, KeyEventKind, Modifiers

logger = logging.getLogger(__name__)

# Seconds a worker thread blocks in inkey() before checking for resize.
DEFAULT_POLL_INTERVAL = 0.1

# blessed key names -> named keys
BLESSED_KEYS: dict[str, KeyCode] = {
    "KEY_ESCAPE": KeyCode.ESC,
    "KEY_ENTER": KeyCode.ENTER,
    "KEY_LEFT": KeyCode.LEFT,
    "KEY_RIGHT": KeyCode.RIGHT,
    "KEY_UP": KeyCode.UP,
    "KEY_DOWN": KeyCode.DOWN,
    "KEY_HOME": KeyCode.HOME,
    "KEY_END": KeyCode.END,
    "KEY_PGUP": KeyCode.PAGE_UP,
    "KEY_PGDOWN": KeyCode.PAGE_DOWN,
    "KEY_BTAB": KeyCode.BACK_TAB,
    "KEY_BACKSPACE": KeyCode.BACKSPACE,
    "KEY_DELETE": KeyCode.DELETE,
    "KEY_INSERT": KeyCode.INSERT,
    "KEY_TAB": KeyCode.TAB,
    **{f"KEY_F{n}": KeyCode(f"f{n}") for n in range(1, 13)},
}

# Modifier tokens inside names such as KEY_CTRL_ALT_F1
MODIFIER_TOKENS = {
    "CTRL": Modifiers.CTRL,
    "ALT": Modifiers.ALT,
    "SHIFT": Modifiers.SHIFT,
}

# Name suffixes for key repeat and release reports
EVENT_SUFFIXES = ("_REPEATED", "_RELEASED")

# Single control characters that are keys of their own
CONTROL_CHARS: dict[str, KeyCode] = {
    "\t": KeyCode.TAB,
    "\r": KeyCode.ENTER,
    "\n": KeyCode.ENTER,
    "\x1b": KeyCode.ESC,
    "\x7f": KeyCode.BACKSPACE,
    "\x08": KeyCode.BACKSPACE,
}

# Control bytes 28..31 are Ctrl plus a symbol
CONTROL_SYMBOLS = {"\x1c": "\\", "\x1d": "]", "\x1e": "^", "\x1f": "_"}


def keystroke_to_event(keystroke: Keystroke) -> Optional[KeyEvent]:
    """Translate a blessed keystroke into a key event.

    Args:
        keystroke: Keystroke returned by ``Terminal.inkey()``.

    Returns:
        The key event, or None for input that is not a single key
        (unknown escape sequences, empty timeouts).
    """
    if not keystroke:
        return None

    # Terminals without repeat and release reporting only deliver presses
    if getattr(keystroke, "released", False):
        kind = KeyEventKind.RELEASE
    elif getattr(keystroke, "repeated", False):
        kind = KeyEventKind.REPEAT
    else:
        kind = KeyEventKind.PRESS

    # Unresolved input: blessed derives names such as KEY_CTRL_I for bare
    # control bytes, which would hide Tab, Enter and Escape.
    if keystroke.code is None:
        event = _from_text(str(keystroke), kind)
        if event is not None:
            return event

    name = keystroke.name
    if name:
        return _from_name(name, kind)
    return None


def _from_name(name: str, kind: KeyEventKind) -> Optional[KeyEvent]:
    """Translate a blessed key name, with or without modifier tokens."""
    for suffix in EVENT_SUFFIXES:
        if name.endswith(suffix):
            name = name[: -len(suffix)]
    if name in BLESSED_KEYS:
        return KeyEvent(BLESSED_KEYS[name], kind=kind)
    if not name.startswith("KEY_"):
        return None

    tokens = name[len("KEY_") :].split("_")
    modifiers = Modifiers.NONE
    while len(tokens) > 1 and tokens[0] in MODIFIER_TOKENS:
        modifiers |= MODIFIER_TOKENS[tokens.pop(0)]
    base = "_".join(tokens)

    if f"KEY_{base}" in BLESSED_KEYS:
        return KeyEvent(BLESSED_KEYS[f"KEY_{base}"], modifiers, kind)
    if base == "SPACE":
        return KeyEvent(" ", modifiers, kind)
    if len(base) == 1 and base.isprintable():
        char = base if Modifiers.SHIFT in modifiers else base.lower()
        return KeyEvent(char, modifiers, kind)
    return None


def _from_text(text: str, kind: KeyEventKind) -> Optional[KeyEvent]:
    """Translate unnamed input using legacy terminal encodings."""
    modifiers = Modifiers.NONE
    if len(text) == 2 and text[0] == "\x1b":
        # metaSendsEscape: ESC + key is Alt + key
        modifiers = Modifiers.ALT
        text = text[1:]
    if len(text) != 1:
        return None

    if text in CONTROL_CHARS:
        return KeyEvent(CONTROL_CHARS[text], modifiers, kind)
    if text in CONTROL_SYMBOLS:
        return KeyEvent(CONTROL_SYMBOLS[text], modifiers | Modifiers.CTRL, kind)

    code = ord(text)
    if code == 0:
        return KeyEvent(" ", modifiers | Modifiers.CTRL, kind)
    if 1 <= code <= 26:
        return KeyEvent(chr(code + ord("a") - 1), modifiers | Modifiers.CTRL, kind)
    if text.isprintable():
        return KeyEvent(text, modifiers, kind)
    return None


class BlessedInputSource:
    """Reads raw events from the terminal through blessed.

    ``inkey()`` blocks, so every poll runs in a worker thread. Polls are
    short so an abandoned read never outlives shutdown for long.
    """

    def __init__(
        self,
        term: Optional[Terminal] = None,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
    ):
        """Initialize the input source.

        Args:
            term: blessed terminal, created when omitted.
            poll_interval: Seconds each blocking inkey() call may wait.
        """
        self._term = term or Terminal()
        self._poll_interval = poll_interval
        self._size: Optional[tuple[int, int]] = None

    @property
    def term(self) -> Terminal:
        """The underlying blessed terminal."""
        return self._term

    async def read(self) -> Optional[RawEvent]:
        """Wait for the next key or a terminal size change."""
        while True:
            keystroke = await asyncio.to_thread(
                self._term.inkey, timeout=self._poll_interval
            )
            if keystroke:
                event = keystroke_to_event(keystroke)
                if event is not None:
                    return event
                logger.debug(f"Ignoring unrecognized input {str(keystroke)!r}")
                continue

            size = (self._term.width, self._term.height)
            if self._size is None:
                self._size = size
            elif size != self._size:
                self._size = size
                return ResizeEvent(cols=size[0], rows=size[1])


@contextlib.contextmanager
def full_screen(term: Terminal) -> Iterator[Terminal]:
    """Alternate screen, raw input and hidden cursor for the block.

    Raw mode turns off the tty signal and flow-control keys, so Ctrl-C,
    Ctrl-Z, Ctrl-S and Ctrl-Q arrive as key presses.
    """
    with term.fullscreen(), term.raw(), term.hidden_cursor():
        yield term
