"""Point member dependency declarations at the workspace table."""

from __future__ import annotations

import logging
from collections.abc import Mapping

from easydep.declaration import (
    Block,
    Declaration,
    InlineAttributes,
    TargetList,
    VersionString,
)
from easydep.document import ManifestDocument, TableHandle

logger = logging.getLogger(__name__)

DEPENDENCY_SECTIONS = ("dependencies", "dev-dependencies", "build-dependencies")


class MemberRewriter:
    """Rewrite common deps in a member manifest to ``{ workspace = true, ... }``.

    Covers the top-level dependency sections and the same sections under every
    ``[target.<cfg>]`` table.  Everything besides ``version`` (features,
    optional, default-features, package) is left in place.
    """

    def apply(self, document: ManifestDocument, common: Mapping[str, str]) -> bool:
        modified = False
        for table in _dependency_tables(document):
            modified |= _rewrite_table(table, common)
        return modified


def _dependency_tables(document: ManifestDocument) -> list[TableHandle]:
    tables: list[TableHandle] = []
    for section in DEPENDENCY_SECTIONS:
        table = document.root.get_table(section)
        if table is not None:
            tables.append(table)

    targets = document.root.get_table("target")
    if targets is not None:
        for cfg in targets.keys():
            target = targets.get_table(cfg)
            for section in DEPENDENCY_SECTIONS:
                table = target.get_table(section)
                if table is not None:
                    tables.append(table)
    return tables


def _rewrite_table(table: TableHandle, common: Mapping[str, str]) -> bool:
    modified = False
    for name in common:
        entry = table.entry(name)
        if entry is None:
            continue
        changed = delegate(entry.declaration())
        if changed:
            logger.debug("Delegated %s in [%s]", name, table.dotted_name)
        modified |= changed
    return modified


def delegate(decl: Declaration) -> bool:
    """Drop the local version and set the workspace marker; return True if changed."""
    if isinstance(decl, VersionString):
        return decl.set_delegation_marker(True)
    if isinstance(decl, (InlineAttributes, Block)):
        if decl.is_local_source():
            return False
        removed = decl.remove_version_field()
        marked = decl.set_delegation_marker(True)
        if (removed or marked) and isinstance(decl, InlineAttributes):
            decl.tidy()
        return removed or marked
    if isinstance(decl, TargetList):
        modified = False
        for block in decl.blocks:
            modified |= delegate(block)
        return modified
    raise TypeError(f"Unhandled declaration variant: {type(decl).__name__}")
