"""Rewriter protocol — all rewriters conform to this interface."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Protocol

from easydep.document import ManifestDocument


class Rewriter(Protocol):
    """Protocol for manifest rewriters."""

    def apply(self, document: ManifestDocument, common: Mapping[str, str]) -> bool:
        """Edit *document* in place for the *common* deps; return True if changed."""
        ...
