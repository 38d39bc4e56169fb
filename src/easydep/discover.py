"""Build the workspace inventory from ``cargo metadata``."""

from __future__ import annotations

import json
import logging
import subprocess
from pathlib import Path

from easydep.errors import DiscoveryError
from easydep.model import DeclaredDependency, ModuleDescriptor, Workspace

logger = logging.getLogger(__name__)

_REGISTRY_PREFIXES = ("registry+", "sparse+")


def discover_workspace(workspace_root: Path | None = None) -> Workspace:
    """Run cargo metadata in *workspace_root* and return its members in order."""
    project_dir = (workspace_root or Path(".")).resolve()
    metadata = _run_cargo_metadata(project_dir)
    return workspace_from_metadata(metadata)


def workspace_from_metadata(metadata: dict) -> Workspace:
    """Convert ``cargo metadata --format-version 1`` JSON into a Workspace."""
    try:
        root = Path(metadata["workspace_root"])
        member_ids = list(metadata.get("workspace_members", []))
        packages = {p["id"]: p for p in metadata.get("packages", [])}
    except (KeyError, TypeError) as e:
        raise DiscoveryError(f"unexpected metadata layout: {e!r}") from e

    members: list[ModuleDescriptor] = []
    for member_id in member_ids:
        pkg = packages.get(member_id)
        if pkg is None:
            raise DiscoveryError(f"Package not found for ID: {member_id}")
        members.append(
            ModuleDescriptor(
                name=pkg["name"],
                manifest_path=Path(pkg["manifest_path"]),
                dependencies=tuple(
                    _declared_dependency(dep) for dep in pkg.get("dependencies", [])
                ),
                id=member_id,
            )
        )

    logger.debug("Workspace %s: %d members", root, len(members))
    return Workspace(root=root, members=members)


def _declared_dependency(dep: dict) -> DeclaredDependency:
    return DeclaredDependency(
        name=dep["name"],
        req=dep.get("req"),
        source_kind=_source_kind(dep),
        kind=dep.get("kind"),
        target=dep.get("target"),
    )


def _source_kind(dep: dict) -> str:
    if dep.get("path"):
        return "path"
    source = dep.get("source") or ""
    if source.startswith(_REGISTRY_PREFIXES):
        return "registry"
    return "other"


def _run_cargo_metadata(project_dir: Path) -> dict:
    """Run cargo metadata and return parsed JSON."""
    try:
        result = subprocess.run(
            ["cargo", "metadata", "--no-deps", "--format-version", "1"],
            capture_output=True,
            text=True,
            cwd=str(project_dir),
            timeout=60,
        )
    except (FileNotFoundError, NotADirectoryError, subprocess.TimeoutExpired) as e:
        raise DiscoveryError(f"could not run cargo metadata: {e}") from e

    if result.returncode != 0:
        raise DiscoveryError(
            result.stderr.strip() if result.stderr else "unknown error"
        )

    try:
        return json.loads(result.stdout)
    except json.JSONDecodeError as e:
        raise DiscoveryError(f"JSON parse error: {e}") from e
