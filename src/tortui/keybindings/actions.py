"""Application actions that key bindings resolve to."""

from enum import Enum

from tortui.errors import ConfigError


class Action(Enum):
    """Action fired by a completed chord sequence.

    Values are the names used in the configuration file.
    """

    QUIT = "Quit"
    ADD_TORRENT = "AddTorrent"
    BACK = "Back"
    NO_OP = "NoOp"

    @classmethod
    def default(cls) -> "Action":
        """Action of a binding that does not name one."""
        return cls.NO_OP

    @classmethod
    def from_name(cls, name: str) -> "Action":
        """Look up an action by its configuration name.

        Raises:
            ConfigError: If no action has that name.
        """
        try:
            return cls(name)
        except ValueError:
            known = ", ".join(a.value for a in cls)
            raise ConfigError(
                f"Unknown action {name!r}. Known actions: [{known}]"
            ) from None
