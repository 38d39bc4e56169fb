"""Format-preserving editing of Cargo manifests.

A thin layer over tomlkit that exposes just the table operations the
rewriters need and converts tomlkit's failures into the engine's own errors.
Anything not touched through these handles serializes back byte-identical.
"""

from __future__ import annotations

import logging
from collections.abc import MutableMapping, Sequence
from pathlib import Path

import tomlkit
from tomlkit.container import OutOfOrderTableProxy
from tomlkit.exceptions import ParseError
from tomlkit.items import Table
from tomlkit.toml_document import TOMLDocument

from easydep.declaration import Declaration, classify
from easydep.errors import ManifestIOError, ManifestParseError, SchemaError

logger = logging.getLogger(__name__)

# Tables split across non-adjacent headers come back as an OutOfOrderTableProxy.
_TABLE_TYPES = (Table, OutOfOrderTableProxy)


class EntryHandle:
    """A single key within a table, e.g. one dependency declaration."""

    def __init__(self, container: MutableMapping, name: str, path: Path | None):
        self._container = container
        self.name = name
        self.path = path

    @property
    def value(self):
        return self._container[self.name]

    def declaration(self) -> Declaration:
        return classify(self._container, self.name, self.path)


class TableHandle:
    """A table reachable from the document root by ``keys``."""

    def __init__(
        self,
        container: MutableMapping,
        keys: tuple[str, ...] = (),
        path: Path | None = None,
    ) -> None:
        self._container = container
        self.keys_path = keys
        self.path = path

    @property
    def dotted_name(self) -> str:
        return ".".join(self.keys_path)

    def keys(self) -> list[str]:
        return list(self._container.keys())

    def __contains__(self, name: str) -> bool:
        return name in self._container

    def get_table(self, key: str) -> TableHandle | None:
        """Return the sub-table *key*, None if absent, SchemaError if not a table."""
        if key not in self._container:
            return None
        value = self._container[key]
        child_keys = (*self.keys_path, key)
        if not isinstance(value, _TABLE_TYPES):
            raise SchemaError(self.path, ".".join(child_keys))
        return TableHandle(value, child_keys, self.path)

    def ensure_table(self, key: str) -> TableHandle:
        """Return the sub-table *key*, appending an empty one if it is missing."""
        handle = self.get_table(key)
        if handle is None:
            child_keys = (*self.keys_path, key)
            logger.debug("Creating table [%s]", ".".join(child_keys))
            self._container[key] = tomlkit.table()
            handle = TableHandle(self._container[key], child_keys, self.path)
        return handle

    def entry(self, name: str) -> EntryHandle | None:
        if name not in self._container:
            return None
        return EntryHandle(self._container, name, self.path)

    def insert(self, name: str, value) -> None:
        """Add a new key at the end of the table."""
        if name in self._container:
            raise KeyError(f"'{name}' already present in [{self.dotted_name}]")
        self._container[name] = value

    def add_blank_line(self) -> None:
        """Append an empty line so the next table header stands apart."""
        self._container.add(tomlkit.nl())


class ManifestDocument:
    """An editable manifest; ``serialize`` reproduces untouched text exactly."""

    def __init__(self, doc: TOMLDocument, path: Path | None = None) -> None:
        self._doc = doc
        self.path = path
        self.root = TableHandle(doc, (), path)

    def get_table(self, keys: Sequence[str]) -> TableHandle | None:
        handle: TableHandle | None = self.root
        for key in keys:
            handle = handle.get_table(key)
            if handle is None:
                return None
        return handle

    def serialize(self) -> str:
        return self._doc.as_string()

    def save(self, path: Path | None = None) -> Path:
        """Write the serialized document back as UTF-8 bytes."""
        target = path or self.path
        if target is None:
            raise ValueError("ManifestDocument has no path to save to")
        try:
            target.write_bytes(self.serialize().encode("utf-8"))
        except OSError as e:
            raise ManifestIOError(target, e) from e
        return target


def parse(text: str, path: Path | None = None) -> ManifestDocument:
    try:
        doc = tomlkit.parse(text)
    except ParseError as e:
        raise ManifestParseError(path, str(e), e.line, e.col) from e
    return ManifestDocument(doc, path)


def load_manifest(path: Path) -> ManifestDocument:
    """Read and parse *path* without newline translation."""
    try:
        raw = path.read_bytes()
    except OSError as e:
        raise ManifestIOError(path, e) from e
    try:
        text = raw.decode("utf-8")
    except UnicodeDecodeError as e:
        raise ManifestParseError(path, f"not valid UTF-8: {e.reason}") from e
    return parse(text, path)
