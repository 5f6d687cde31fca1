"""Trie of chord sequences per key mode."""

from dataclasses import dataclass, field
from typing import Any, Iterator, Optional, Sequence

from tortui.errors import ConfigError
from tortui.keybindings.actions import Action
from tortui.keybindings.chords import Chord


@dataclass(frozen=True)
class BindingValue:
    """What a chord sequence is bound to.

    The description is only shown to the user, it plays no part in matching.
    """

    action: Action = Action.NO_OP
    description: Optional[str] = None

    @classmethod
    def from_raw(cls, raw: Any) -> "BindingValue":
        """Parse a configuration value.

        Accepts either a bare action name (``"Quit"``) or a mapping with
        optional ``action`` and ``description`` keys.

        Raises:
            ConfigError: If the value has any other shape.
        """
        if isinstance(raw, str):
            return cls(action=Action.from_name(raw))

        if isinstance(raw, dict):
            unknown = set(raw) - {"action", "description"}
            if unknown:
                raise ConfigError(
                    f"Unknown binding fields: {', '.join(sorted(unknown))}"
                )
            action = raw.get("action")
            description = raw.get("description")
            if description is not None and not isinstance(description, str):
                raise ConfigError(f"Binding description must be text: {description!r}")
            return cls(
                action=Action.default() if action is None else Action.from_name(action),
                description=description,
            )

        raise ConfigError(f"Invalid binding value: {raw!r}")


@dataclass
class BindingNode:
    """One position in a bindings trie."""

    action: Action = Action.NO_OP
    description: Optional[str] = None
    children: dict[Chord, "BindingNode"] = field(default_factory=dict)

    @property
    def is_leaf(self) -> bool:
        """A leaf fires its action when reached."""
        return not self.children

    def get(self, chord: Chord) -> Optional["BindingNode"]:
        """Child reached by pressing ``chord``, if any."""
        return self.children.get(chord)

    def walk(self) -> Iterator[tuple[tuple[Chord, ...], "BindingNode"]]:
        """Yield every node below this one with the chords leading to it.

        Depth first, in insertion order.
        """
        stack: list[tuple[tuple[Chord, ...], BindingNode]] = [((), self)]
        while stack:
            path, node = stack.pop()
            if path:
                yield path, node
            for chord, child in reversed(list(node.children.items())):
                stack.append((path + (chord,), child))


def add_binding(
    root: BindingNode,
    chords: Sequence[Chord],
    value: BindingValue,
) -> BindingNode:
    """Insert a chord sequence into the trie rooted at ``root``.

    Intermediate nodes are reused when they exist and created empty
    otherwise. The final node gets ``value``'s action and description,
    replacing earlier ones but keeping its children.

    Returns:
        The node at the end of the sequence.

    Raises:
        ValueError: If ``chords`` is empty.
    """
    if not chords:
        raise ValueError("A binding needs at least one chord")

    current = root
    for chord in chords[:-1]:
        current = current.children.setdefault(chord, BindingNode())

    node = current.children.setdefault(chords[-1], BindingNode())
    node.action = value.action
    node.description = value.description
    return node
