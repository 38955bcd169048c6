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

"""Public API return types for rpmbaseline.

This module defines dataclasses for return values from public API functions.
These types represent the results of operations like selection,
materialization, indexing, building and validation.

All dataclasses are frozen (immutable) to prevent accidental mutation of
return values.

Example:
    Using result types:
        ```python
        from pathlib import Path
        from rpmbaseline.core import build_baseline
        from rpmbaseline.results import BuildResult

        result: BuildResult = build_baseline(Path("baselines/el7.yaml"))
        print(result.tree, result.linked)
        ```

Note:
    Only public API return types belong in this module. Domain types
    (like PackageEntry) and configuration records (like MainConfig) stay
    co-located with their related logic.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from rpmbaseline.versioning import PackageEntry


@dataclass(frozen=True)
class SelectionResult:
    """Result from selecting and ranking packages without writing anything.

    Attributes:
        name: Baseline name.
        candidates: Number of entries accepted by the selection filter.
        retained: Entries kept by retention, in ranking order.
    """

    name: str
    candidates: int
    retained: list[PackageEntry]


@dataclass(frozen=True)
class MaterializeResult:
    """Result from linking retained entries into a baseline tree.

    Attributes:
        tree: Baseline tree root.
        linked: Number of links created.
        skipped: Number of entries whose target already existed.
        arches: Architectures present in the tree.
    """

    tree: Path
    linked: int
    skipped: int
    arches: list[str]


@dataclass(frozen=True)
class ToolResult:
    """Result from a successful external tool invocation.

    Attributes:
        command: The command line that was run.
        returncode: Exit status (always 0 for a returned result).
        output: Captured stdout and stderr.
    """

    command: list[str]
    returncode: int
    output: str


@dataclass(frozen=True)
class BuildResult:
    """Result from building a baseline.

    Attributes:
        name: Baseline name.
        tree: Baseline tree root.
        candidates: Entries accepted by the selection filter.
        retained: Entries kept by retention.
        linked: Links created.
        skipped: Duplicate targets skipped.
        indexed: Whether the indexer ran.
        signed: Files that were signed.
        repo_file: Client repository snippet.
        record_file: Human-readable run record.
        status: Build status (typically "success").
    """

    name: str
    tree: Path
    candidates: int
    retained: int
    linked: int
    skipped: int
    indexed: bool
    signed: list[Path]
    repo_file: Path
    record_file: Path
    status: str


@dataclass(frozen=True)
class ValidationResult:
    """Result from validating a baseline definition.

    Attributes:
        status: Validation status ("valid" or "invalid").
        errors: List of error messages (empty if valid).
        warnings: List of warning messages.
        source_count: Number of source directories in the definition.
        definition_path: String path to the validated definition file.
    """

    status: str
    errors: list[str]
    warnings: list[str]
    source_count: int
    definition_path: str
