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

"""Baseline definition validation module.

This module checks a baseline definition without walking source trees,
linking anything or running external tools. It is meant for quick feedback
while writing definitions and in CI pipelines.

Validation Checks:

- YAML syntax is valid and the top level is a mapping
- Required fields present (name, platform, type, rpm_dirs)
- type is yum or zypper
- Each rpm_dirs entry has a dir and a YYYY-MM-DD date
- versions is a positive integer; include_32bit is a boolean
- include/exclude are lists
- Main configuration (when given) loads and its defaults are applied

Warnings (do not make a definition invalid):

- Source directory does not exist yet
- Both include and exclude are set (exclude is ignored)
- os_release is not a string (YAML may have turned "7.10" into 7.1)
- Unknown top-level fields

Example:
    Validate a definition and handle results:
        ```python
        from pathlib import Path
        from rpmbaseline.validation import validate_baseline

        result = validate_baseline(Path("baselines/el7-2024q1.yaml"))
        if result.status == "valid":
            print(f"Definition is valid with {result.source_count} source(s)")
        else:
            for error in result.errors:
                print(f"Error: {error}")
        ```

"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml

from rpmbaseline.config import load_main_config
from rpmbaseline.config.loader import REPO_TYPES, _deep_merge_dicts
from rpmbaseline.exceptions import BaselineError
from rpmbaseline.results import ValidationResult
from rpmbaseline.selection import parse_cutoff_date

__all__ = ["validate_baseline"]

KNOWN_FIELDS = {
    "name",
    "description",
    "platform",
    "type",
    "rpm_dirs",
    "os_release",
    "versions",
    "include",
    "exclude",
    "include_32bit",
    "release_packages",
}


def _invalid(errors: list[str], warnings: list[str], path: Path) -> ValidationResult:
    return ValidationResult(
        status="invalid",
        errors=errors,
        warnings=warnings,
        source_count=0,
        definition_path=str(path),
    )


def _check_sources(
    rpm_dirs: Any, base_dir: Path, errors: list[str], warnings: list[str]
) -> int:
    if not isinstance(rpm_dirs, list) or not rpm_dirs:
        errors.append("Field 'rpm_dirs' must be a non-empty list")
        return 0

    for idx, item in enumerate(rpm_dirs):
        prefix = f"rpm_dirs[{idx}]"
        if not isinstance(item, dict):
            errors.append(f"{prefix}: Must be a dictionary")
            continue
        if not item.get("dir"):
            errors.append(f"{prefix}: Missing required field: dir")
        else:
            path = Path(str(item["dir"])).expanduser()
            if not path.is_absolute():
                path = base_dir / path
            if not path.is_dir():
                warnings.append(f"{prefix}: Directory does not exist: {path}")
        if item.get("date") is None:
            errors.append(f"{prefix}: Missing required field: date")
        else:
            try:
                parse_cutoff_date(item["date"])
            except BaselineError as err:
                errors.append(f"{prefix}.date: {err}")

    return len(rpm_dirs)


def validate_baseline(
    definition_path: Path,
    config_path: Path | None = None,
    verbose: bool = False,
) -> ValidationResult:
    """Validate a baseline definition without building anything.

    This function checks:

    1. YAML file can be parsed
    2. The main configuration loads, when a path is given
    3. Required fields are present and well-typed
    4. Every source directory entry has a dir and a valid date

    Does NOT:

    - Walk source directories
    - Create the output tree
    - Run createrepo or gpg

    Args:
        definition_path: Path to the baseline definition YAML file.
        config_path: Path to the main configuration. When given, its
            ``defaults`` are merged under the definition before checking.
        verbose: If True, print validation progress. Default is False.

    Returns:
        ValidationResult with status "valid" or "invalid", the error and
            warning lists, and the number of source directories.

    """
    errors: list[str] = []
    warnings: list[str] = []

    if verbose:
        print(f"Validating baseline definition: {definition_path}")

    if not definition_path.exists():
        errors.append(f"Definition file not found: {definition_path}")
        return _invalid(errors, warnings, definition_path)

    try:
        with open(definition_path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as err:
        errors.append(f"Invalid YAML syntax: {err}")
        return _invalid(errors, warnings, definition_path)
    except OSError as err:
        errors.append(f"Failed to read definition file: {err}")
        return _invalid(errors, warnings, definition_path)

    if verbose:
        print("  [OK] YAML syntax is valid")

    if not isinstance(data, dict):
        errors.append("Definition must be a YAML dictionary/mapping")
        return _invalid(errors, warnings, definition_path)

    for key in sorted(set(data) - KNOWN_FIELDS):
        warnings.append(f"Unknown field: {key}")

    if config_path is not None:
        try:
            main_config = load_main_config(config_path)
        except BaselineError as err:
            errors.append(f"Main configuration: {err}")
            return _invalid(errors, warnings, definition_path)
        if main_config.defaults:
            data = _deep_merge_dicts(main_config.defaults, data)
        if verbose:
            print(f"  [OK] Main configuration loaded: {config_path}")

    for field in ["name", "platform", "type", "rpm_dirs"]:
        if field not in data or data[field] in (None, ""):
            errors.append(f"Missing required field: {field}")

    name = data.get("name")
    if name is not None:
        if not isinstance(name, str):
            errors.append("Field 'name' must be a string")
        elif "/" in name or name in (".", ".."):
            errors.append(f"Field 'name' is not a valid directory name: {name!r}")

    repo_type = data.get("type")
    if repo_type is not None and str(repo_type).lower() not in REPO_TYPES:
        errors.append(
            f"Field 'type' must be one of: {', '.join(REPO_TYPES)} (got {repo_type!r})"
        )

    versions = data.get("versions")
    if versions is not None and (
        isinstance(versions, bool) or not isinstance(versions, int) or versions < 1
    ):
        errors.append("Field 'versions' must be a positive integer")

    include_32bit = data.get("include_32bit")
    if include_32bit is not None and not isinstance(include_32bit, bool):
        errors.append(
            f"Field 'include_32bit' must be true or false (got {include_32bit!r})"
        )

    for field in ["include", "exclude", "release_packages"]:
        value = data.get(field)
        if value is not None and not isinstance(value, (list, str)):
            errors.append(f"Field '{field}' must be a list")

    if data.get("include") and data.get("exclude"):
        warnings.append("Both 'include' and 'exclude' are set; 'exclude' is ignored")

    os_release = data.get("os_release")
    if os_release is not None and not isinstance(os_release, str):
        warnings.append(
            f"Field 'os_release' is not a string ({os_release!r}); quote it in YAML"
        )

    source_count = 0
    if "rpm_dirs" in data:
        source_count = _check_sources(
            data["rpm_dirs"], definition_path.parent, errors, warnings
        )
        if verbose and source_count:
            print(f"  [OK] Found {source_count} source directory(ies)")

    status = "valid" if len(errors) == 0 else "invalid"

    if verbose:
        if status == "valid":
            print("  [OK] Definition is valid!")
        else:
            print(f"  [ERROR] Definition has {len(errors)} error(s)")

    return ValidationResult(
        status=status,
        errors=errors,
        warnings=warnings,
        source_count=source_count,
        definition_path=str(definition_path),
    )
