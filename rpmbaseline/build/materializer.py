# Copyright 2025 Roger Cibrian
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""Baseline tree materialization for rpmbaseline.

Links retained packages into the baseline tree without copying them.

Design Principles:
    - Tree layout is ``<tree>/RPMS/<arch>/<name>-<major>-<minor>.<arch>.<ext>``
    - Source files are never modified, moved or copied
    - An existing target is skipped, so a package reachable from several
      source directories is linked once and reruns are idempotent
    - A failed link aborts the run; partial output is left in place

Example:
    Link retained entries:
        ```python
        from pathlib import Path
        from rpmbaseline.build import materialize, prepare_tree

        tree = prepare_tree(Path("/srv/baselines/el7-2024q1"), clean=True)
        result = materialize(retained, tree)
        print(f"{result.linked} linked, {result.skipped} skipped")
        ```
"""

from __future__ import annotations

import os
from pathlib import Path
import shutil
from typing import Iterable

from rpmbaseline.exceptions import FilesystemError
from rpmbaseline.logging import get_global_logger
from rpmbaseline.results import MaterializeResult
from rpmbaseline.versioning import PackageEntry

PACKAGES_DIR = "RPMS"


def prepare_tree(tree: Path, *, clean: bool = True) -> Path:
    """Create the baseline tree directory.

    Args:
        tree: Baseline tree root (``baseline_dir/<name>``).
        clean: Remove an existing tree first. Default is True.

    Returns:
        The tree path.

    Raises:
        FilesystemError: If the tree cannot be removed or created.
    """
    logger = get_global_logger()

    if clean and tree.exists():
        logger.verbose("LINK", f"Removing existing baseline: {tree}")
        try:
            shutil.rmtree(tree)
        except OSError as err:
            raise FilesystemError(f"Cannot remove {tree}: {err}") from err

    try:
        (tree / PACKAGES_DIR).mkdir(parents=True, exist_ok=True)
    except OSError as err:
        raise FilesystemError(f"Cannot create output directory {tree}: {err}") from err

    logger.verbose("LINK", f"Baseline directory ready: {tree}")
    return tree


def target_path(tree: Path, entry: PackageEntry) -> Path:
    """Return the canonical location of an entry inside a baseline tree."""
    return tree / PACKAGES_DIR / entry.arch / entry.filename


def _link(source: Path, target: Path, link_type: str) -> None:
    if link_type == "hardlink":
        os.link(source, target)
    else:
        os.symlink(source, target)


def materialize(
    entries: Iterable[PackageEntry],
    tree: Path,
    *,
    link_type: str = "symlink",
) -> MaterializeResult:
    """Link each retained entry into the baseline tree.

    Args:
        entries: Retained entries.
        tree: Baseline tree root.
        link_type: "symlink" (default) or "hardlink".

    Returns:
        MaterializeResult with counts of created and skipped links.

    Raises:
        FilesystemError: If an arch directory or a link cannot be created.
    """
    logger = get_global_logger()
    linked = 0
    skipped = 0
    arches: set[str] = set()

    for entry in entries:
        target = target_path(tree, entry)
        arches.add(entry.arch)

        try:
            target.parent.mkdir(parents=True, exist_ok=True)
        except OSError as err:
            raise FilesystemError(
                f"Cannot create directory {target.parent}: {err}"
            ) from err

        # lexists: a dangling symlink still counts as present
        if os.path.lexists(target):
            skipped += 1
            logger.debug("LINK", f"exists, skipping: {target.name}")
            continue

        try:
            _link(entry.source_path, target, link_type)
        except OSError as err:
            raise FilesystemError(
                f"Failed to link {target} -> {entry.source_path}: {err}"
            ) from err

        linked += 1
        logger.debug("LINK", f"{target.name} -> {entry.source_path}")

    logger.verbose("LINK", f"[OK] {linked} linked, {skipped} already present")

    return MaterializeResult(
        tree=tree,
        linked=linked,
        skipped=skipped,
        arches=sorted(arches),
    )
