"""Base exceptions for tortui."""


class TortuiError(Exception):
    """Base exception for all tortui errors."""

    pass


class ConfigError(TortuiError):
    """Configuration value is invalid."""

    pass


class KeyGrammarError(ConfigError):
    """Chord sequence string could not be parsed."""

    def __init__(self, message: str, raw: str):
        super().__init__(message)
        self.raw = raw


class ModeNotFoundError(TortuiError):
    """Requested key mode has no bindings tree."""

    def __init__(self, mode, available):
        self.mode = mode
        self.available = list(available)
        names = ", ".join(m.value for m in self.available) or "none"
        super().__init__(
            f"Key mode {mode.value} not found. Available key modes: [{names}]"
        )
