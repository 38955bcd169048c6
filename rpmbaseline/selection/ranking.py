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

"""Ranking and retention for rpmbaseline.

Entries are sorted by a composite key, each level consulted only on ties of
the previous one:

1. ``(name, arch)`` ascending, the grouping key
2. ``major`` descending (plain comparison)
3. ``minor`` descending (release normalization on Red-Hat platforms)

One pass over the sorted list then keeps the first ``max_versions`` entries
of every group. Entries with identical versions still each use up a slot.
"""

from __future__ import annotations

from typing import Iterable

from rpmbaseline.exceptions import ConfigError
from rpmbaseline.logging import get_global_logger
from rpmbaseline.versioning import PackageEntry, version_sort_key


def rank_entries(
    entries: Iterable[PackageEntry], *, normalize: bool = False
) -> list[PackageEntry]:
    """Sort entries by group, then newest version first.

    Sorting runs least significant key first and relies on sort stability,
    so entries tied on every key keep their discovery order.

    Args:
        entries: Candidate entries in any order.
        normalize: Strip ``elN`` markers when comparing release strings.

    Returns:
        A new list in ranking order.
    """
    major_key = version_sort_key()
    minor_key = version_sort_key(normalize=normalize)

    ranked = sorted(entries, key=lambda e: minor_key(e.minor), reverse=True)
    ranked.sort(key=lambda e: major_key(e.major), reverse=True)
    ranked.sort(key=lambda e: e.group)
    return ranked


def retain_newest(
    entries: Iterable[PackageEntry],
    max_versions: int,
    *,
    normalize: bool = False,
) -> list[PackageEntry]:
    """Rank entries and keep the newest ``max_versions`` of each group.

    Args:
        entries: Candidate entries in any order.
        max_versions: Versions to keep per (name, arch) group.
        normalize: Strip ``elN`` markers when comparing release strings.

    Returns:
        Retained entries in ranking order.

    Raises:
        ConfigError: If max_versions is less than 1.

    Example:
        Keep the two newest releases:
            ```python
            kept = retain_newest(entries, 2, normalize=True)
            ```
    """
    if max_versions < 1:
        raise ConfigError(f"versions must be at least 1, got {max_versions}")

    logger = get_global_logger()
    retained: list[PackageEntry] = []
    current: tuple[str, str] | None = None
    counter = 0

    for entry in rank_entries(entries, normalize=normalize):
        if entry.group != current:
            current = entry.group
            counter = 1
        if counter <= max_versions:
            retained.append(entry)
            logger.debug("RANK", f"keep {entry.filename}")
        else:
            logger.debug("RANK", f"drop {entry.filename}")
        counter += 1

    return retained
