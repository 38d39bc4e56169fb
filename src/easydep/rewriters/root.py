"""Add common dependencies to the root ``[workspace.dependencies]`` table."""

from __future__ import annotations

import logging
from collections.abc import Mapping

from easydep.document import ManifestDocument

logger = logging.getLogger(__name__)


class RootRewriter:
    """Ensure ``[workspace.dependencies]`` lists every common dependency.

    Existing entries are never overwritten: a pin the maintainer wrote in the
    root manifest wins over the inferred requirement.
    """

    def apply(self, document: ManifestDocument, common: Mapping[str, str]) -> bool:
        workspace = document.root.ensure_table("workspace")
        created = "dependencies" not in workspace
        deps = workspace.ensure_table("dependencies")

        modified = False
        for name in sorted(common):
            if name in deps:
                logger.debug("Keeping existing workspace pin for %s", name)
                continue
            deps.insert(name, common[name])
            logger.debug("Added %s = %s to workspace dependencies", name, common[name])
            modified = True

        # A new table that is followed by other headers needs a separating line.
        if created and modified and document.root.keys()[-1] != "workspace":
            deps.add_blank_line()
        return modified
