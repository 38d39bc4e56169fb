"""Shapes a dependency entry can take inside a Cargo dependency table.

Every entry is classified into exactly one of four variants:

* ``VersionString``    ``foo = "1.0"``
* ``InlineAttributes`` ``foo = { version = "1.0", features = ["x"] }``
* ``Block``            ``[dependencies.foo]`` (or dotted ``foo.version = ...``)
* ``TargetList``       ``[[dependencies.foo]]``

All four expose the same small editing surface so callers can dispatch on the
variant without probing the underlying tomlkit items themselves.
"""

from __future__ import annotations

from collections.abc import MutableMapping
from pathlib import Path
from typing import Union

import tomlkit
from tomlkit.container import OutOfOrderTableProxy
from tomlkit.items import AoT, Bool, InlineTable, String, Table

from easydep.errors import MalformedDeclaration

DELEGATION_MARKER = "workspace"
VERSION_KEY = "version"

# Keys that point the dependency somewhere other than a registry.
_LOCAL_SOURCE_KEYS = ("path", "git")


class VersionString:
    """``name = "req"``; mutations promote the entry to an inline table."""

    def __init__(
        self, container: MutableMapping, name: str, path: Path | None = None
    ) -> None:
        self.container = container
        self.name = name
        self.path = path

    @property
    def text(self) -> str:
        return str(self.container[self.name])

    def has_version_field(self) -> bool:
        return True

    def is_local_source(self) -> bool:
        return False

    def get_delegation_marker(self) -> bool | None:
        return None

    def remove_version_field(self) -> bool:
        self.container[self.name] = tomlkit.value("{}")
        return True

    def set_delegation_marker(self, flag: bool) -> bool:
        # Dropping the version string entirely is the point of delegating.
        marker = "true" if flag else "false"
        self.container[self.name] = tomlkit.value(
            f"{{ {DELEGATION_MARKER} = {marker} }}"
        )
        return True


class _AttributeSet:
    def __init__(
        self, table: MutableMapping, name: str, path: Path | None = None
    ) -> None:
        self.table = table
        self.name = name
        self.path = path

    def has_version_field(self) -> bool:
        return VERSION_KEY in self.table

    def is_local_source(self) -> bool:
        return any(key in self.table for key in _LOCAL_SOURCE_KEYS)

    def remove_version_field(self) -> bool:
        if VERSION_KEY not in self.table:
            return False
        del self.table[VERSION_KEY]
        return True

    def get_delegation_marker(self) -> bool | None:
        if DELEGATION_MARKER not in self.table:
            return None
        value = self.table[DELEGATION_MARKER]
        if isinstance(value, Bool):
            value = value.value
        if not isinstance(value, bool):
            raise MalformedDeclaration(
                self.path,
                self.name,
                f"'{DELEGATION_MARKER}' must be a boolean, got {type(value).__name__}",
            )
        return value

    def set_delegation_marker(self, flag: bool) -> bool:
        if self.get_delegation_marker() is flag:
            return False
        self.table[DELEGATION_MARKER] = flag
        return True


class InlineAttributes(_AttributeSet):
    """``name = { ... }`` on a single line."""

    def __init__(
        self,
        table: MutableMapping,
        name: str,
        path: Path | None = None,
        container: MutableMapping | None = None,
    ) -> None:
        super().__init__(table, name, path)
        self.container = container

    def tidy(self) -> None:
        """Re-render as ``{ key = value, ... }`` after keys were removed or added."""
        if self.container is None:
            return
        parts = []
        for key, item in self.table.value.body:
            if key is None:
                continue
            if isinstance(item, Table):
                # Dotted keys inside the braces; leave the layout alone.
                return
            parts.append(f"{key.as_string().strip()} = {item.as_string()}")
        raw = "{ " + ", ".join(parts) + " }" if parts else "{}"

        old = self.table
        new = tomlkit.value(raw)
        new.trivia.comment_ws = old.trivia.comment_ws
        new.trivia.comment = old.trivia.comment
        new.trivia.trail = old.trivia.trail
        self.container[self.name] = new
        self.table = self.container[self.name]


class Block(_AttributeSet):
    """``[dependencies.name]`` or dotted keys under ``[dependencies]``."""


class TargetList:
    """``[[dependencies.name]]``: one attribute block per element."""

    def __init__(self, blocks: list[Block], name: str, path: Path | None = None):
        self.blocks = blocks
        self.name = name
        self.path = path

    def has_version_field(self) -> bool:
        return any(block.has_version_field() for block in self.blocks)

    def is_local_source(self) -> bool:
        # Decided per element by callers.
        return False

    def remove_version_field(self) -> bool:
        removed = [block.remove_version_field() for block in self.blocks]
        return any(removed)

    def get_delegation_marker(self) -> bool | None:
        """Return the shared marker value, or None if absent or mixed."""
        markers = {block.get_delegation_marker() for block in self.blocks}
        if len(markers) == 1:
            return markers.pop()
        return None

    def set_delegation_marker(self, flag: bool) -> bool:
        changed = [block.set_delegation_marker(flag) for block in self.blocks]
        return any(changed)


Declaration = Union[VersionString, InlineAttributes, Block, TargetList]


def classify(
    container: MutableMapping, name: str, path: Path | None = None
) -> Declaration:
    """Classify ``container[name]`` into one of the declaration variants."""
    value = container[name]
    if isinstance(value, String):
        return VersionString(container, name, path)
    if isinstance(value, InlineTable):
        return InlineAttributes(value, name, path, container)
    # Several dotted keys (foo.version, foo.features) come back as a proxy.
    if isinstance(value, (Table, OutOfOrderTableProxy)):
        return Block(value, name, path)
    if isinstance(value, AoT):
        return TargetList([Block(t, name, path) for t in value], name, path)
    raise MalformedDeclaration(
        path, name, f"unexpected value of type {type(value).__name__}"
    )
