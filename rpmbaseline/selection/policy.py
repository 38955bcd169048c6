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

"""Selection policy for rpmbaseline.

A SelectionPolicy is built once per run from the baseline definition (plus
CLI overrides) and passed explicitly to the filter and ranking functions.
It is frozen; overrides produce a new policy via ``dataclasses.replace``.

Cutoff Semantics:
    A source directory's cutoff date covers the whole calendar day in local
    time. Files whose mtime is before local midnight of the FOLLOWING day are
    accepted, so ``23:59:59`` on the cutoff date is in and ``00:00:00`` the
    next day is out.

Example:
    Build a policy by hand:
        ```python
        from datetime import date
        from pathlib import Path
        from rpmbaseline.selection import SelectionPolicy, SourceDir

        policy = SelectionPolicy(
            sources=(SourceDir(Path("/srv/centos/7/os"), date(2024, 3, 1)),),
            max_versions=2,
            normalize=True,
        )
        ```
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from pathlib import Path
import re

from rpmbaseline.exceptions import MalformedInputError

_DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")

# Packages that identify the OS release itself; pinned by os_release
DEFAULT_RELEASE_PACKAGES: tuple[str, ...] = (
    "redhat-release",
    "redhat-release-server",
    "redhat-release-workstation",
    "centos-release",
    "rocky-release",
    "almalinux-release",
    "oraclelinux-release",
    "sl-release",
    "sles-release",
    "sled-release",
)


@dataclass(frozen=True)
class SourceDir:
    """A source directory and its cutoff date.

    Attributes:
        path: Directory to scan recursively for package files.
        cutoff: Last calendar day whose files are accepted.

    """

    path: Path
    cutoff: date


@dataclass(frozen=True)
class SelectionPolicy:
    """Immutable per-run selection settings.

    Attributes:
        sources: Source directories in configuration order.
        max_versions: Number of newest versions kept per (name, arch) group.
        include: Allow-list of package names. When non-empty it is the only
            name filter; the exclude list is ignored.
        exclude: Deny-list of package names.
        os_release: Release line that release packages must start with.
        release_packages: Package names treated as the platform release
            package for the os_release constraint.
        include_32bit: Keep i386/i486/i586/i686 packages.
        normalize: Strip ``elN`` markers when comparing release strings
            (Red-Hat-derived platforms).

    """

    sources: tuple[SourceDir, ...] = ()
    max_versions: int = 1
    include: tuple[str, ...] = ()
    exclude: tuple[str, ...] = ()
    os_release: str | None = None
    release_packages: tuple[str, ...] = DEFAULT_RELEASE_PACKAGES
    include_32bit: bool = False
    normalize: bool = False


def parse_cutoff_date(value: str | date) -> date:
    """Parse an operator-supplied cutoff date.

    Args:
        value: A ``YYYY-MM-DD`` string, or a date already parsed by YAML.

    Returns:
        The parsed date.

    Raises:
        MalformedInputError: If the string does not match YYYY-MM-DD or is
            not a real calendar date.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = str(value).strip()
    if not _DATE_PATTERN.match(text):
        raise MalformedInputError(
            f"Invalid date {value!r}: expected format YYYY-MM-DD"
        )
    try:
        return datetime.strptime(text, "%Y-%m-%d").date()
    except ValueError as err:
        raise MalformedInputError(f"Invalid date {value!r}: {err}") from err


def cutoff_timestamp(day: date) -> float:
    """Return the exclusive upper bound for mtimes on a cutoff date.

    Args:
        day: The cutoff date.

    Returns:
        POSIX timestamp of local midnight at the start of the next day.
    """
    return datetime.combine(day + timedelta(days=1), time.min).timestamp()
