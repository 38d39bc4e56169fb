"""Data model for workspace inventories and run results."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from easydep.errors import EasyDepError


@dataclass(frozen=True)
class DeclaredDependency:
    """A single dependency as declared by a workspace member."""

    name: str
    req: str | None = None
    source_kind: str = "registry"  # "registry", "path", "other"
    kind: str | None = None  # None (normal), "dev", "build"
    target: str | None = None  # cfg expression for target-specific deps

    @property
    def is_registry(self) -> bool:
        return self.source_kind == "registry"


@dataclass(frozen=True)
class ModuleDescriptor:
    """A workspace member and the dependencies it declares."""

    name: str
    manifest_path: Path
    dependencies: tuple[DeclaredDependency, ...] = ()
    id: str | None = None


@dataclass
class Workspace:
    """The root manifest location plus members in inventory order."""

    root: Path
    members: list[ModuleDescriptor] = field(default_factory=list)

    @property
    def root_manifest(self) -> Path:
        return self.root / "Cargo.toml"


@dataclass
class RunReport:
    """Outcome of a pipeline run, used for reporting and exit status."""

    common: dict[str, str] = field(default_factory=dict)
    conflicts: dict[str, list[str]] = field(default_factory=dict)
    root_modified: bool = False
    updated: list[Path] = field(default_factory=list)
    unchanged: list[Path] = field(default_factory=list)
    failures: list[tuple[Path, EasyDepError]] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failures
