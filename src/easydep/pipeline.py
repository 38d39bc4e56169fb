"""Orchestrator: discover → analyze → root rewrite → member rewrites."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path

from easydep.analysis import find_common_dependencies, find_requirement_conflicts
from easydep.config import DEFAULT_MIN_OCCURRENCES, read_config
from easydep.discover import discover_workspace
from easydep.document import load_manifest
from easydep.errors import EasyDepError
from easydep.model import RunReport, Workspace
from easydep.rewriters import MemberRewriter, RootRewriter
from easydep.rewriters.base import Rewriter

logger = logging.getLogger(__name__)


def _rewrite_manifest(
    manifest_path: Path, rewriter: Rewriter, common: Mapping[str, str]
) -> bool:
    document = load_manifest(manifest_path)
    modified = rewriter.apply(document, common)
    if modified:
        document.save()
    return modified


def update_root_manifest(manifest_path: Path, common: Mapping[str, str]) -> bool:
    """Add missing common deps to the root manifest; write it only if changed."""
    modified = _rewrite_manifest(manifest_path, RootRewriter(), common)
    if modified:
        logger.info(
            "Updated root Cargo.toml with %d common dependencies", len(common)
        )
    else:
        logger.info("No changes needed for root Cargo.toml")
    return modified


def update_member_manifest(manifest_path: Path, common: Mapping[str, str]) -> bool:
    """Delegate common deps in one member manifest; write it only if changed."""
    modified = _rewrite_manifest(manifest_path, MemberRewriter(), common)
    if modified:
        logger.info("  - Updated member at: %s", manifest_path)
    else:
        logger.info("  - No changes needed for: %s", manifest_path)
    return modified


def _process_member(
    manifest_path: Path, common: Mapping[str, str], keep_going: bool
) -> tuple[Path, bool, EasyDepError | None]:
    try:
        return manifest_path, update_member_manifest(manifest_path, common), None
    except EasyDepError as e:
        if not keep_going:
            raise
        logger.error("%s", e)
        return manifest_path, False, e


def _rewrite_members(
    manifests: list[Path],
    common: Mapping[str, str],
    keep_going: bool,
    jobs: int,
) -> list[tuple[Path, bool, EasyDepError | None]]:
    if jobs <= 1 or len(manifests) <= 1:
        return [_process_member(path, common, keep_going) for path in manifests]

    # Each worker owns one manifest end to end; nothing is shared between them.
    with ThreadPoolExecutor(max_workers=jobs) as pool:
        futures = [
            pool.submit(_process_member, path, common, keep_going)
            for path in manifests
        ]
        try:
            return [future.result() for future in futures]
        except EasyDepError:
            for future in futures:
                future.cancel()
            raise


def consolidate(
    workspace: Workspace,
    *,
    min_occurrences: int | None = None,
    exclude: Iterable[str] = (),
    keep_going: bool = False,
    jobs: int = 1,
) -> RunReport:
    """Hoist common deps of an already-discovered *workspace*.

    The root manifest is rewritten and saved before any member is touched.
    By default the first error aborts the run; with *keep_going* member
    failures are collected in the report instead.
    """
    config = read_config(workspace.root_manifest)
    threshold = min_occurrences or config.min_occurrences or DEFAULT_MIN_OCCURRENCES
    excluded = [*config.exclude, *exclude]

    logger.info(
        "Detecting common dependencies across %d workspace members...",
        len(workspace.members),
    )
    common = find_common_dependencies(workspace.members, threshold, excluded)
    report = RunReport(common=common)
    if not common:
        logger.info("No common dependencies found across workspace members.")
        return report

    logger.info("Found %d common dependencies:", len(common))
    for name, req in common.items():
        logger.info("  - %s = %s", name, req)

    report.conflicts = find_requirement_conflicts(workspace.members, common)
    for name, reqs in report.conflicts.items():
        logger.warning(
            "%s is required as %s across members; using %s",
            name,
            ", ".join(reqs),
            reqs[0],
        )

    logger.info("Updating root Cargo.toml...")
    report.root_modified = update_root_manifest(workspace.root_manifest, common)

    logger.info("Updating member Cargo.toml files...")
    manifests = list(dict.fromkeys(m.manifest_path for m in workspace.members))
    for path, modified, error in _rewrite_members(manifests, common, keep_going, jobs):
        if error is not None:
            report.failures.append((path, error))
        elif modified:
            report.updated.append(path)
        else:
            report.unchanged.append(path)

    if report.updated:
        logger.info("Updated %d member Cargo.toml files", len(report.updated))
    return report


def run(
    workspace_root: Path | None = None,
    *,
    min_occurrences: int | None = None,
    exclude: Iterable[str] = (),
    keep_going: bool = False,
    jobs: int = 1,
) -> RunReport:
    """Discover the workspace at *workspace_root* and consolidate its deps."""
    logger.info("Analyzing workspace...")
    workspace = discover_workspace(workspace_root)
    return consolidate(
        workspace,
        min_occurrences=min_occurrences,
        exclude=exclude,
        keep_going=keep_going,
        jobs=jobs,
    )
