"""Key modes select which bindings tree is active."""

from enum import Enum

from tortui.errors import ConfigError


class KeyMode(Enum):
    """Input context of the application."""

    TORRENT_LIST = "TorrentList"
    ADD_TORRENT = "AddTorrent"

    @classmethod
    def default(cls) -> "KeyMode":
        """Mode the application starts in."""
        return cls.TORRENT_LIST

    @classmethod
    def from_name(cls, name: str) -> "KeyMode":
        """Look up a mode by its configuration name.

        Raises:
            ConfigError: If no mode has that name.
        """
        try:
            return cls(name)
        except ValueError:
            known = ", ".join(m.value for m in cls)
            raise ConfigError(
                f"Unknown key mode {name!r}. Known key modes: [{known}]"
            ) from None
