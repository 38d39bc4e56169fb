"""Shared helpers for building throwaway Cargo workspaces."""

from __future__ import annotations

from pathlib import Path

import pytest

from easydep.model import DeclaredDependency, ModuleDescriptor, Workspace


def reg(name: str, req: str | None = "^1.0", **kw) -> DeclaredDependency:
    return DeclaredDependency(name=name, req=req, source_kind="registry", **kw)


def local(name: str) -> DeclaredDependency:
    return DeclaredDependency(name=name, req="*", source_kind="path")


def module(name: str, *deps: DeclaredDependency, path: Path | None = None):
    return ModuleDescriptor(
        name=name,
        manifest_path=path or Path(name) / "Cargo.toml",
        dependencies=tuple(deps),
    )


@pytest.fixture
def make_workspace(tmp_path):
    """Write a root manifest and member manifests, return a Workspace.

    *members* maps a member name to ``(manifest_text, [DeclaredDependency])``.
    """

    def _make(root_text: str, members: dict[str, tuple[str, list]]) -> Workspace:
        (tmp_path / "Cargo.toml").write_text(root_text)
        descriptors = []
        for name, (text, deps) in members.items():
            crate_dir = tmp_path / name
            crate_dir.mkdir()
            manifest = crate_dir / "Cargo.toml"
            manifest.write_text(text)
            descriptors.append(module(name, *deps, path=manifest))
        return Workspace(root=tmp_path, members=descriptors)

    return _make
