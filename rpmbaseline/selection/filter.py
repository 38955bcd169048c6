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

"""Selection filter for rpmbaseline.

Walks each source directory and decides which package files are candidates
for the baseline. Rules are applied in order and the first match rejects:

1. Source, boot and delta packages (path markers), always.
2. 32-bit packages, unless the policy includes them.
3. Files whose mtime is not before the end of the cutoff date.
4. Include list: when non-empty, names not in it are rejected and the
   exclude list is not consulted.
5. Exclude list.
6. OS release cap: a release package whose major version does not start
   with the configured os_release.

Accepted entries from all directories are pooled in configuration order
for ranking.

Example:
    Select candidates for a policy:
        ```python
        from rpmbaseline.selection import select_candidates

        entries = select_candidates(policy)
        print(f"{len(entries)} candidate packages")
        ```
"""

from __future__ import annotations

from collections import Counter
from pathlib import Path
import re

from rpmbaseline.exceptions import FilesystemError
from rpmbaseline.logging import get_global_logger
from rpmbaseline.versioning import PackageEntry, parse_package_path

from .policy import SelectionPolicy, SourceDir, cutoff_timestamp

PACKAGE_GLOB = "*.rpm"

_SOURCE_MARKER = re.compile(r"\.(?:no)?src\.rpm$|/SRPMS/", re.IGNORECASE)
_BOOT_MARKER = re.compile(r"/boot/")
_DELTA_MARKER = re.compile(r"\.delta\.rpm$|/drpms/", re.IGNORECASE)
_32BIT_MARKER = re.compile(r"[./](?:i[3-6]86|athlon)[./]")


def _path_rejection(path: Path, root: Path, policy: SelectionPolicy) -> str | None:
    """Return the name of the path-based rule rejecting this file, if any."""
    # Markers are matched below the source root only
    text = "/" + path.relative_to(root).as_posix()
    if _SOURCE_MARKER.search(text):
        return "source"
    if _BOOT_MARKER.search(text):
        return "boot"
    if _DELTA_MARKER.search(text):
        return "delta"
    if not policy.include_32bit and _32BIT_MARKER.search(text):
        return "32bit"
    return None


def _name_rejection(entry: PackageEntry, policy: SelectionPolicy) -> str | None:
    """Return the name of the name-based rule rejecting this entry, if any."""
    if policy.include:
        if entry.name not in policy.include:
            return "not-included"
    elif entry.name in policy.exclude:
        return "excluded"

    if (
        policy.os_release
        and entry.name in policy.release_packages
        and not entry.major.startswith(policy.os_release)
    ):
        return "os-release"
    return None


def select_from_directory(
    source: SourceDir, policy: SelectionPolicy
) -> list[PackageEntry]:
    """Select candidate packages from one source directory.

    Args:
        source: Directory and cutoff date to apply.
        policy: Selection policy for this run.

    Returns:
        Accepted entries, in discovery order.

    Raises:
        FilesystemError: If the directory does not exist or a file cannot
            be read.
    """
    logger = get_global_logger()
    root = source.path
    if not root.is_dir():
        raise FilesystemError(f"Source directory not found: {root}")

    limit = cutoff_timestamp(source.cutoff)
    rejected: Counter[str] = Counter()
    accepted: list[PackageEntry] = []

    logger.verbose("SELECT", f"Scanning {root} (cutoff {source.cutoff.isoformat()})")

    for path in sorted(root.rglob(PACKAGE_GLOB)):
        if not path.is_file():
            continue

        reason = _path_rejection(path, root, policy)
        if reason is None:
            try:
                mtime = path.stat().st_mtime
            except OSError as err:
                raise FilesystemError(f"Cannot stat {path}: {err}") from err
            if mtime >= limit:
                reason = "after-cutoff"

        entry: PackageEntry | None = None
        if reason is None:
            entry = parse_package_path(path.absolute())
            if not entry.exact:
                logger.debug("SELECT", f"Loose filename parse: {path.name}")
            reason = _name_rejection(entry, policy)

        if reason is not None:
            rejected[reason] += 1
            logger.debug("SELECT", f"  skip ({reason}): {path.name}")
            continue

        accepted.append(entry)

    logger.verbose("SELECT", f"  accepted {len(accepted)} package(s) from {root}")
    for reason, count in sorted(rejected.items()):
        logger.debug("SELECT", f"  rejected {count} ({reason})")

    return accepted


def select_candidates(policy: SelectionPolicy) -> list[PackageEntry]:
    """Pool accepted entries from every source directory of a policy.

    Args:
        policy: Selection policy for this run.

    Returns:
        All accepted entries, directory by directory in configuration order.

    Raises:
        FilesystemError: If a source directory is missing or unreadable.
    """
    pooled: list[PackageEntry] = []
    for source in policy.sources:
        pooled.extend(select_from_directory(source, policy))
    return pooled
