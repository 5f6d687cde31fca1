"""Tests for blessed terminal input."""

import asyncio
from unittest.mock import MagicMock

import pytest
from blessed.keyboard import Keystroke

from tortui.events import ResizeEvent
from tortui.keybindings import Chord, KeyCode, KeyEvent, KeyEventKind, Modifiers
from tortui.terminal import BlessedInputSource, full_screen, keystroke_to_event


class TestKeystrokeText:
    """Test translation of unnamed keystrokes."""

    def test_printable_character(self):
        """A plain letter is an unmodified key."""
        assert keystroke_to_event(Keystroke("q")) == KeyEvent("q")

    def test_uppercase_character(self):
        """Shifted letters arrive as the uppercase character."""
        event = keystroke_to_event(Keystroke("Q"))

        assert event == KeyEvent("Q")
        assert Chord.from_key_event(event) == Chord("Q")

    @pytest.mark.parametrize(
        "text,key",
        [("\x01", "a"), ("\x03", "c"), ("\x1a", "z")],
    )
    def test_control_letters(self, text, key):
        """Control bytes 1..26 are Ctrl plus a letter."""
        assert keystroke_to_event(Keystroke(text)) == KeyEvent(key, Modifiers.CTRL)

    def test_ctrl_backslash(self):
        """Control byte 28 is Ctrl-backslash."""
        assert keystroke_to_event(Keystroke("\x1c")) == KeyEvent("\\", Modifiers.CTRL)

    @pytest.mark.parametrize("text,key", [("\x03", "c"), ("\x13", "s"), ("\x1a", "z")])
    def test_signal_keys_are_ctrl_letters(self, text, key):
        """In raw mode Ctrl-C, Ctrl-S and Ctrl-Z arrive as bytes."""
        assert keystroke_to_event(Keystroke(text)) == KeyEvent(key, Modifiers.CTRL)

    def test_ctrl_space(self):
        """NUL is Ctrl-space."""
        assert keystroke_to_event(Keystroke("\x00")) == KeyEvent(" ", Modifiers.CTRL)

    @pytest.mark.parametrize(
        "text,code",
        [
            ("\t", KeyCode.TAB),
            ("\r", KeyCode.ENTER),
            ("\x1b", KeyCode.ESC),
            ("\x7f", KeyCode.BACKSPACE),
        ],
    )
    def test_control_keys(self, text, code):
        """Control bytes with a key of their own keep it."""
        assert keystroke_to_event(Keystroke(text)) == KeyEvent(code)

    def test_escape_prefix_is_alt(self):
        """ESC followed by a key is Alt plus that key."""
        assert keystroke_to_event(Keystroke("\x1bq")) == KeyEvent("q", Modifiers.ALT)

    def test_escape_prefix_control(self):
        """Alt combines with a control byte."""
        assert keystroke_to_event(Keystroke("\x1b\x01")) == KeyEvent(
            "a", Modifiers.ALT | Modifiers.CTRL
        )

    def test_unknown_sequence(self):
        """Unrecognized escape sequences are not keys."""
        assert keystroke_to_event(Keystroke("\x1b[99~")) is None

    def test_empty_keystroke(self):
        """A timed-out inkey() yields no event."""
        assert keystroke_to_event(Keystroke("")) is None


class TestKeystrokeNames:
    """Test translation of named keystrokes."""

    @pytest.mark.parametrize(
        "name,code",
        [
            ("KEY_UP", KeyCode.UP),
            ("KEY_ESCAPE", KeyCode.ESC),
            ("KEY_ENTER", KeyCode.ENTER),
            ("KEY_PGDOWN", KeyCode.PAGE_DOWN),
            ("KEY_BTAB", KeyCode.BACK_TAB),
            ("KEY_F12", KeyCode.F12),
        ],
    )
    def test_named_keys(self, name, code):
        """blessed key names map to named keys."""
        keystroke = Keystroke("\x1b[?", code=1, name=name)

        assert keystroke_to_event(keystroke) == KeyEvent(code)

    def test_modified_function_key(self):
        """Modifier tokens in a name become modifiers."""
        keystroke = Keystroke("\x1b[1;7P", code=1, name="KEY_CTRL_ALT_F1")

        assert keystroke_to_event(keystroke) == KeyEvent(
            KeyCode.F1, Modifiers.CTRL | Modifiers.ALT
        )

    def test_shift_arrow(self):
        """Shift is kept on named keys."""
        keystroke = Keystroke("\x1b[1;2A", code=1, name="KEY_SHIFT_UP")

        assert keystroke_to_event(keystroke) == KeyEvent(KeyCode.UP, Modifiers.SHIFT)

    def test_ctrl_letter_name(self):
        """Named control letters are lower case."""
        keystroke = Keystroke("\x01", code=1, name="KEY_CTRL_A")

        assert keystroke_to_event(keystroke) == KeyEvent("a", Modifiers.CTRL)

    def test_alt_shift_letter_name(self):
        """Shifted letters match their uppercase chord."""
        keystroke = Keystroke("\x1bQ", code=1, name="KEY_ALT_SHIFT_Q")

        event = keystroke_to_event(keystroke)

        assert Chord.from_key_event(event) == Chord("Q", Modifiers.ALT)

    def test_ctrl_space_name(self):
        """SPACE names the space key."""
        keystroke = Keystroke("\x00", code=1, name="KEY_CTRL_SPACE")

        assert keystroke_to_event(keystroke) == KeyEvent(" ", Modifiers.CTRL)

    def test_event_type_suffix_is_ignored(self):
        """Release and repeat suffixes do not change the key."""
        keystroke = Keystroke("\x01", code=1, name="KEY_CTRL_A_REPEATED")

        event = keystroke_to_event(keystroke)

        assert (event.key, event.modifiers) == ("a", Modifiers.CTRL)

    def test_unknown_name(self):
        """Names without a key of ours are ignored."""
        keystroke = Keystroke("\x1b[E", code=1, name="KEY_CENTER")

        assert keystroke_to_event(keystroke) is None


class ReportingKeystroke(Keystroke):
    """Keystroke from a terminal that reports repeats and releases."""

    event_type = 1

    @property
    def pressed(self):
        return self.event_type == 1

    @property
    def repeated(self):
        return self.event_type == 2

    @property
    def released(self):
        return self.event_type == 3


def reported(text, event_type):
    keystroke = ReportingKeystroke(text)
    keystroke.event_type = event_type
    return keystroke


class TestKeystrokeKind:
    """Test press, repeat and release reports."""

    def test_plain_keystroke_is_press(self):
        """Terminals without event reporting deliver presses."""
        assert keystroke_to_event(Keystroke("q")).kind is KeyEventKind.PRESS

    @pytest.mark.parametrize(
        "event_type,kind",
        [
            (1, KeyEventKind.PRESS),
            (2, KeyEventKind.REPEAT),
            (3, KeyEventKind.RELEASE),
        ],
    )
    def test_reported_kind(self, event_type, kind):
        """Auto-repeat is not mistaken for a release."""
        event = keystroke_to_event(reported("q", event_type))

        assert event == KeyEvent("q", kind=kind)


class MockTerminal:
    """Mock blessed terminal for testing."""

    def __init__(self, keystrokes, width=80, height=24):
        self._keystrokes = list(keystrokes)
        self.width = width
        self.height = height
        self.timeouts: list[float] = []

    def inkey(self, timeout=None):
        """Return the next scripted keystroke, or a timeout."""
        self.timeouts.append(timeout)
        if self._keystrokes:
            keystroke = self._keystrokes.pop(0)
            if callable(keystroke):
                return keystroke(self)
            return keystroke
        return Keystroke("")


def resize(width, height):
    """Scripted step that resizes the terminal and times out."""

    def _step(term):
        term.width = width
        term.height = height
        return Keystroke("")

    return _step


class TestBlessedInputSource:
    """Test reading events through blessed."""

    @pytest.mark.asyncio
    async def test_reads_key(self):
        """A keystroke becomes a key event."""
        term = MockTerminal([Keystroke("q")])
        source = BlessedInputSource(term=term, poll_interval=0.05)

        assert await asyncio.wait_for(source.read(), 1.0) == KeyEvent("q")
        assert term.timeouts == [0.05]

    @pytest.mark.asyncio
    async def test_skips_unrecognized_input(self):
        """Unknown sequences are skipped, not returned."""
        term = MockTerminal([Keystroke("\x1b[99~"), Keystroke("\x01")])
        source = BlessedInputSource(term=term, poll_interval=0.01)

        event = await asyncio.wait_for(source.read(), 1.0)

        assert event == KeyEvent("a", Modifiers.CTRL)

    @pytest.mark.asyncio
    async def test_reports_resize(self):
        """A size change between polls is a resize event."""
        term = MockTerminal([Keystroke(""), resize(100, 40)])
        source = BlessedInputSource(term=term, poll_interval=0.01)

        event = await asyncio.wait_for(source.read(), 1.0)

        assert event == ResizeEvent(cols=100, rows=40)

    @pytest.mark.asyncio
    async def test_resize_then_key(self):
        """Reads continue after a resize."""
        term = MockTerminal([Keystroke(""), resize(100, 40), Keystroke("x")])
        source = BlessedInputSource(term=term, poll_interval=0.01)

        assert isinstance(await asyncio.wait_for(source.read(), 1.0), ResizeEvent)
        assert await asyncio.wait_for(source.read(), 1.0) == KeyEvent("x")

    def test_exposes_terminal(self):
        """The wrapped terminal is available for screen handling."""
        term = MockTerminal([])

        assert BlessedInputSource(term=term).term is term


class TestFullScreen:
    """Test terminal mode handling."""

    def test_enters_raw_mode(self):
        """Signal and flow-control keys must reach inkey()."""
        term = MagicMock()

        with full_screen(term) as entered:
            assert entered is term
            term.raw.return_value.__enter__.assert_called_once()
            term.fullscreen.return_value.__enter__.assert_called_once()
            term.hidden_cursor.return_value.__enter__.assert_called_once()

        term.cbreak.assert_not_called()
        term.raw.return_value.__exit__.assert_called_once()
