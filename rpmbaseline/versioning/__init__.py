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

"""Filename parsing and version comparison for rpmbaseline.

Modules:
    filename
        Positional parser turning package paths into PackageEntry records.
    keys
        Dotted mixed alphanumeric version comparison with optional
        enterprise-linux release normalization.

Example:
    Parse two packages and compare their releases:
        ```python
        from rpmbaseline.versioning import compare_versions, parse_package_path

        a = parse_package_path("httpd-2.4-6.el7.x86_64.rpm")
        b = parse_package_path("httpd-2.4-18.el7.x86_64.rpm")
        compare_versions(a.minor, b.minor, normalize=True)  # Returns: -1
        ```

Note:
    Version comparison is format-agnostic: no file I/O. The parser only
    looks at the basename of the path it is given.

"""

from .filename import PackageEntry, parse_package_path
from .keys import (
    compare_versions,
    is_redhat_family,
    normalize_release,
    version_sort_key,
)

__all__ = [
    "PackageEntry",
    "parse_package_path",
    "compare_versions",
    "is_redhat_family",
    "normalize_release",
    "version_sort_key",
]
