"""Manifest rewriters: root first, then every member."""

from __future__ import annotations

from easydep.rewriters.member import DEPENDENCY_SECTIONS, MemberRewriter
from easydep.rewriters.root import RootRewriter

__all__ = [
    "DEPENDENCY_SECTIONS",
    "MemberRewriter",
    "RootRewriter",
]
