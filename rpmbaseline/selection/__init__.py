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

"""Package selection for rpmbaseline.

This package decides which package files make it into a baseline:

- policy: the immutable SelectionPolicy and cutoff-date helpers
- filter: directory walk and per-file inclusion rules
- ranking: grouping by (name, arch), newest-first sort and retention

Example:
    Select and retain:
        ```python
        from rpmbaseline.selection import retain_newest, select_candidates

        candidates = select_candidates(policy)
        kept = retain_newest(candidates, policy.max_versions, normalize=policy.normalize)
        ```
"""

from .filter import select_candidates, select_from_directory
from .policy import (
    DEFAULT_RELEASE_PACKAGES,
    SelectionPolicy,
    SourceDir,
    cutoff_timestamp,
    parse_cutoff_date,
)
from .ranking import rank_entries, retain_newest

__all__ = [
    "DEFAULT_RELEASE_PACKAGES",
    "SelectionPolicy",
    "SourceDir",
    "cutoff_timestamp",
    "parse_cutoff_date",
    "rank_entries",
    "retain_newest",
    "select_candidates",
    "select_from_directory",
]
