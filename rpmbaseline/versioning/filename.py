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

"""Package filename parsing for rpmbaseline.

Package identity and version come from the filename alone; package headers
are never read.

Filename Pattern:
    ``<name>-<major>-<minor>.<arch>[.update<N>].<ext>``

    - The basename is split on ``-``. The last dash segment is a dot
      cluster holding minor-version tokens, the architecture, an optional
      update marker and the extension.
    - The second-to-last dash segment is the major version.
    - Everything before it, rejoined with ``-``, is the name.

    Splitting is positional. A name with a dash followed by a version-like
    token (``foo-2-bar-1.0-1.noarch.rpm``) is split at the last two dashes
    only, which is a known limitation.

Lenient Parsing:
    parse_package_path() never raises. A filename that does not fit the
    pattern still yields a best-effort PackageEntry with empty strings for
    the missing parts and ``exact=False``. Such entries compare lexically
    in ranking and are linked under whatever name they produced.

Example:
    Parse a package path:
        ```python
        from pathlib import Path
        from rpmbaseline.versioning import parse_package_path

        entry = parse_package_path(Path("/srv/os/httpd-2.4.6-18.el7.x86_64.rpm"))
        print(entry.name, entry.major, entry.minor, entry.arch)
        # httpd 2.4.6 18.el7 x86_64
        ```
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
import re

# Distribution hot-fix marker that sits between arch and extension
_UPDATE_MARKER = re.compile(r"^update\d*$", re.IGNORECASE)


@dataclass(frozen=True)
class PackageEntry:
    """A candidate package file discovered on disk.

    Attributes:
        name: Base package identity (e.g., "httpd").
        major: First version component (e.g., "2.4.6").
        minor: Release component, may carry distribution tags
            (e.g., "18.el7_9").
        arch: Architecture qualifier (e.g., "x86_64", "noarch").
        ext: File extension without the dot (e.g., "rpm").
        source_path: Absolute path to the original file. Never modified.
        exact: True when every part of the filename pattern was present.

    """

    name: str
    major: str
    minor: str
    arch: str
    ext: str
    source_path: Path
    exact: bool = True

    @property
    def group(self) -> tuple[str, str]:
        """Grouping key used by ranking: (name, arch)."""
        return (self.name, self.arch)

    @property
    def filename(self) -> str:
        """Canonical filename used inside the baseline tree."""
        return f"{self.name}-{self.major}-{self.minor}.{self.arch}.{self.ext}"


def parse_package_path(path: Path | str) -> PackageEntry:
    """Parse a package file path into a PackageEntry.

    Args:
        path: Path to a package file. Only the basename is parsed.

    Returns:
        A PackageEntry. Malformed names produce a best-effort entry with
            ``exact=False`` instead of an error.
    """
    source_path = Path(path)
    dash_parts = source_path.name.split("-")

    name = "-".join(dash_parts[:-2])
    major = dash_parts[-2] if len(dash_parts) >= 2 else ""

    tokens = dash_parts[-1].split(".")
    ext = tokens.pop()
    if tokens and _UPDATE_MARKER.match(tokens[-1]):
        tokens.pop()
    arch = tokens.pop() if tokens else ""
    minor = ".".join(tokens)

    exact = bool(name and major and minor and arch and ext)

    return PackageEntry(
        name=name,
        major=major,
        minor=minor,
        arch=arch,
        ext=ext,
        source_path=source_path,
        exact=exact,
    )
