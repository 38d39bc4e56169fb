"""Cross-member frequency analysis of registry dependencies."""

from __future__ import annotations

import logging
from collections import defaultdict
from collections.abc import Iterable, Sequence

from easydep.model import ModuleDescriptor

logger = logging.getLogger(__name__)

# Requirement recorded when a declaration carries none.
ANY_VERSION = "*"


def find_common_dependencies(
    modules: Sequence[ModuleDescriptor],
    min_occurrences: int = 2,
    exclude: Iterable[str] = (),
) -> dict[str, str]:
    """Return ``{name: requirement}`` for deps used at least *min_occurrences* times.

    Occurrences are counted per declaration, in inventory order, over
    registry-sourced dependencies only.  The representative requirement is the
    one from the first occurrence of the name; later occurrences never change
    it, even when they ask for a different range.
    """
    if min_occurrences < 1:
        raise ValueError(f"min_occurrences must be >= 1, got {min_occurrences}")

    skip = set(exclude)
    counts: dict[str, int] = defaultdict(int)
    first_req: dict[str, str] = {}
    common: dict[str, str] = {}

    for module in modules:
        for dep in module.dependencies:
            if not dep.is_registry or dep.name in skip:
                continue
            counts[dep.name] += 1
            first_req.setdefault(dep.name, dep.req or ANY_VERSION)
            if counts[dep.name] >= min_occurrences and dep.name not in common:
                common[dep.name] = first_req[dep.name]

    logger.debug(
        "Counted %d registry dependencies, %d reach %d occurrences",
        len(counts),
        len(common),
        min_occurrences,
    )
    return common


def find_requirement_conflicts(
    modules: Sequence[ModuleDescriptor], common: dict[str, str]
) -> dict[str, list[str]]:
    """Return the distinct requirements seen for each common dep that has several.

    Requirements are listed in first-seen order, so element 0 is always the
    representative chosen by :func:`find_common_dependencies`.
    """
    seen: dict[str, list[str]] = defaultdict(list)
    for module in modules:
        for dep in module.dependencies:
            if dep.name not in common or not dep.is_registry:
                continue
            req = dep.req or ANY_VERSION
            if req not in seen[dep.name]:
                seen[dep.name].append(req)
    return {name: reqs for name, reqs in seen.items() if len(reqs) > 1}
