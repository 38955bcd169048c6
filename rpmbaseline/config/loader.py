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

"""Configuration loading and merging for rpmbaseline.

Two YAML documents drive a run:

1. **Main configuration** (default /etc/rpmbaseline/config.yaml)
   - Site-wide paths: where baselines are written and how they are served
   - The createrepo command, worker hint, company name, signing key
   - An optional ``defaults`` mapping applied underneath every baseline
     definition

2. **Baseline definition** (e.g., baselines/el7-2024q1.yaml)
   - Name, description, target platform and repository type
   - Source directories with their cutoff dates
   - Retention count, include/exclude lists, OS release pin

Merge Behavior:
    The main configuration's ``defaults`` are deep-merged under the
    definition with "last wins" semantics:

    - **Dicts**: Recursively merged (keys from the definition win)
    - **Lists**: Completely replaced (NOT appended/extended)
    - **Scalars**: Overwritten (strings, numbers, booleans)

Path Resolution:
    Relative ``rpm_dirs[].dir`` paths are resolved against the directory of
    the definition file, so definitions are relocatable.

Error Handling:
    - ConfigError: Missing file, YAML parse errors, empty files, non-mapping
        top level, missing required fields, invalid values
    - MalformedInputError: Cutoff dates not in YYYY-MM-DD form
    - All errors are chained with "from err" for better debugging

Example:
    Basic usage:
        ```python
        from pathlib import Path
        from rpmbaseline.config import load_baseline_definition, load_main_config

        main = load_main_config(Path("/etc/rpmbaseline/config.yaml"))
        baseline = load_baseline_definition(Path("baselines/el7.yaml"), main)
        print(baseline.name, len(baseline.rpm_dirs))
        ```
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from rpmbaseline.exceptions import ConfigError
from rpmbaseline.selection.policy import (
    DEFAULT_RELEASE_PACKAGES,
    SourceDir,
    parse_cutoff_date,
)

DEFAULT_CONFIG_PATH = Path("/etc/rpmbaseline/config.yaml")

REPO_TYPES = ("yum", "zypper")
LINK_TYPES = ("symlink", "hardlink")

# -------------------------------
# Data types
# -------------------------------


@dataclass(frozen=True)
class MainConfig:
    """Site-wide settings from the main configuration file.

    Attributes:
        baseline_dir: Directory under which each baseline gets its own tree.
        http_served_from: Filesystem directory that the web server publishes.
        http_server_uri: URI at which http_served_from is reachable.
        createrepo_cmd: Indexer command line (e.g., "createrepo_c").
        workers: Worker-count hint passed verbatim to the indexer.
        company: Vendor string written into zypper descriptors.
        gpg_key: Key id used to sign repository metadata. Signing is skipped
            when unset.
        link_type: "symlink" (default) or "hardlink".
        defaults: Baseline-definition fields applied under every definition.
        source_path: File the configuration was loaded from.

    """

    baseline_dir: Path
    http_served_from: Path
    http_server_uri: str
    createrepo_cmd: str
    workers: int | None = None
    company: str | None = None
    gpg_key: str | None = None
    link_type: str = "symlink"
    defaults: dict[str, Any] = field(default_factory=dict)
    source_path: Path | None = None


@dataclass(frozen=True)
class BaselineDefinition:
    """A single baseline to build.

    Attributes:
        name: Baseline name, also the output subdirectory name.
        description: Human-readable description.
        platform: Target platform (e.g., "rhel7", "sles12").
        repo_type: "yum" or "zypper".
        rpm_dirs: Source directories with cutoff dates.
        os_release: Release line pinned for release packages.
        versions: Versions retained per (name, arch) group.
        include: Allow-list of package names.
        exclude: Deny-list of package names.
        include_32bit: Keep 32-bit packages.
        release_packages: Names treated as the platform release package.
        source_path: File the definition was loaded from.

    """

    name: str
    description: str
    platform: str
    repo_type: str
    rpm_dirs: tuple[SourceDir, ...]
    os_release: str | None = None
    versions: int = 1
    include: tuple[str, ...] = ()
    exclude: tuple[str, ...] = ()
    include_32bit: bool = False
    release_packages: tuple[str, ...] = DEFAULT_RELEASE_PACKAGES
    source_path: Path | None = None


# -------------------------------
# YAML helpers
# -------------------------------


def _load_yaml_file(p: Path) -> dict[str, Any]:
    """Loads a YAML file that must contain a mapping.

    Args:
        p: Path to the YAML file to load.

    Returns:
        The parsed mapping.

    Raises:
        ConfigError: When the file does not exist or cannot be read, on
            invalid YAML, on empty files, or when the top level is not a
            mapping.
    """
    if not p.exists():
        raise ConfigError(f"file not found: {p}")
    try:
        with p.open("r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as err:
        raise ConfigError(f"Error parsing YAML: {p}: {err}") from err
    except OSError as err:
        raise ConfigError(f"Cannot read {p}: {err}") from err
    if data is None:
        raise ConfigError(f"YAML file is empty: {p}")
    if not isinstance(data, dict):
        raise ConfigError(f"top-level YAML must be a mapping (dict): {p}")
    return data


def _print_yaml_content(data: dict[str, Any]) -> None:
    """Print YAML content line by line for debug mode."""
    from rpmbaseline.logging import get_global_logger

    logger = get_global_logger()
    yaml_str = yaml.safe_dump(data, default_flow_style=False, sort_keys=False)
    for line in yaml_str.split("\n"):
        if line.strip():
            logger.debug("CONFIG", line)


# -------------------------------
# Merge logic
# -------------------------------


def _deep_merge_dicts(base: dict[str, Any], overlay: dict[str, Any]) -> dict[str, Any]:
    """Deep-merges two dicts with "overlay wins" semantics.

    Merge behavior:

    - dict + dict -> deep merge
    - list + list -> overlay REPLACES base (not concatenated)
    - everything else -> overlay overwrites base

    This function does not mutate inputs; returns a new dict.

    Args:
        base: The base dictionary.
        overlay: The overlay dictionary that takes precedence.

    Returns:
        A new dictionary with the merged contents.
    """
    result: dict[str, Any] = dict(base)
    for k, v in overlay.items():
        if k in result and isinstance(result[k], dict) and isinstance(v, dict):
            result[k] = _deep_merge_dicts(result[k], v)
        else:
            result[k] = v
    return result


# -------------------------------
# Field helpers
# -------------------------------


def _require(data: dict[str, Any], key: str, source: Path) -> Any:
    value = data.get(key)
    if value is None or (isinstance(value, str) and not value.strip()):
        raise ConfigError(f"Missing required field '{key}' in {source}")
    return value


def _name_list(data: dict[str, Any], key: str, source: Path) -> tuple[str, ...]:
    value = data.get(key) or []
    if isinstance(value, str):
        value = [value]
    if not isinstance(value, list):
        raise ConfigError(f"Field '{key}' must be a list in {source}")
    return tuple(str(v) for v in value)


def _positive_int(value: Any, key: str, source: Path) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ConfigError(f"Field '{key}' must be an integer in {source}")
    if value < 1:
        raise ConfigError(f"Field '{key}' must be at least 1 in {source}")
    return value


def _flag(data: dict[str, Any], key: str, source: Path) -> bool:
    value = data.get(key)
    if value is None:
        return False
    if not isinstance(value, bool):
        raise ConfigError(
            f"Field '{key}' must be true or false in {source} (got {value!r})"
        )
    return value


def _source_dirs(data: dict[str, Any], base_dir: Path, source: Path) -> tuple[SourceDir, ...]:
    raw = _require(data, "rpm_dirs", source)
    if not isinstance(raw, list) or not raw:
        raise ConfigError(f"Field 'rpm_dirs' must be a non-empty list in {source}")

    dirs: list[SourceDir] = []
    for idx, item in enumerate(raw):
        if not isinstance(item, dict):
            raise ConfigError(f"rpm_dirs[{idx}] must be a mapping in {source}")
        if not item.get("dir"):
            raise ConfigError(f"rpm_dirs[{idx}]: missing required field 'dir' in {source}")
        if item.get("date") is None:
            raise ConfigError(f"rpm_dirs[{idx}]: missing required field 'date' in {source}")
        path = Path(str(item["dir"])).expanduser()
        if not path.is_absolute():
            path = (base_dir / path).resolve()
        dirs.append(SourceDir(path=path, cutoff=parse_cutoff_date(item["date"])))
    return tuple(dirs)


# -------------------------------
# Public API
# -------------------------------


def load_main_config(config_path: Path = DEFAULT_CONFIG_PATH) -> MainConfig:
    """Loads the main configuration file.

    Args:
        config_path: Path to the main configuration YAML file.

    Returns:
        A frozen MainConfig.

    Raises:
        ConfigError: If the file is missing or unreadable, or a required
            field is missing or invalid.
    """
    from rpmbaseline.logging import get_global_logger

    logger = get_global_logger()
    config_path = config_path.expanduser().resolve()
    logger.verbose("CONFIG", f"Loading main config: {config_path}")

    data = _load_yaml_file(config_path)
    logger.debug("CONFIG", f"--- Content from {config_path.name} ---")
    _print_yaml_content(data)

    workers = data.get("workers")
    link_type = str(data.get("link_type") or "symlink")
    if link_type not in LINK_TYPES:
        raise ConfigError(
            f"Invalid link_type {link_type!r} in {config_path} "
            f"(expected one of: {', '.join(LINK_TYPES)})"
        )
    defaults = data.get("defaults") or {}
    if not isinstance(defaults, dict):
        raise ConfigError(f"Field 'defaults' must be a mapping in {config_path}")

    return MainConfig(
        baseline_dir=Path(str(_require(data, "baseline_dir", config_path))).expanduser(),
        http_served_from=Path(
            str(_require(data, "http_served_from", config_path))
        ).expanduser(),
        http_server_uri=str(_require(data, "http_server_uri", config_path)),
        createrepo_cmd=str(_require(data, "createrepo_cmd", config_path)),
        workers=None if workers is None else _positive_int(workers, "workers", config_path),
        company=data.get("company"),
        gpg_key=data.get("gpg_key"),
        link_type=link_type,
        defaults=defaults,
        source_path=config_path,
    )


def load_baseline_definition(
    definition_path: Path,
    main_config: MainConfig | None = None,
) -> BaselineDefinition:
    """Loads a baseline definition, applying main-config defaults.

    Performs the following operations:

    1. Read the definition YAML
    2. Deep-merge it over ``main_config.defaults`` (definition wins)
    3. Check required fields (name, platform, type, rpm_dirs)
    4. Parse cutoff dates and resolve relative source directories

    Args:
        definition_path: Path to the baseline definition YAML file.
        main_config: Main configuration whose ``defaults`` apply. Optional.

    Returns:
        A frozen BaselineDefinition.

    Raises:
        ConfigError: If the file is missing or unreadable, or a required
            field is missing or invalid.
        MalformedInputError: If a cutoff date is not in YYYY-MM-DD form.
    """
    from rpmbaseline.logging import get_global_logger

    logger = get_global_logger()
    definition_path = definition_path.expanduser().resolve()
    logger.verbose("CONFIG", f"Loading baseline definition: {definition_path}")

    data = _load_yaml_file(definition_path)
    if main_config and main_config.defaults:
        logger.verbose("CONFIG", "Merging main config defaults under definition")
        data = _deep_merge_dicts(main_config.defaults, data)

    logger.debug("CONFIG", "--- Effective baseline definition ---")
    _print_yaml_content(data)

    name = _require(data, "name", definition_path)
    if not isinstance(name, str):
        raise ConfigError(f"Field 'name' must be a string in {definition_path}")
    if "/" in name or name in (".", ".."):
        raise ConfigError(f"Invalid baseline name {name!r} in {definition_path}")

    repo_type = str(_require(data, "type", definition_path)).lower()
    if repo_type not in REPO_TYPES:
        raise ConfigError(
            f"Invalid type {repo_type!r} in {definition_path} "
            f"(expected one of: {', '.join(REPO_TYPES)})"
        )

    os_release = data.get("os_release")
    versions = data.get("versions")
    release_packages = _name_list(data, "release_packages", definition_path)

    return BaselineDefinition(
        name=name,
        description=str(data.get("description") or name),
        platform=str(_require(data, "platform", definition_path)),
        repo_type=repo_type,
        rpm_dirs=_source_dirs(data, definition_path.parent, definition_path),
        os_release=None if os_release is None else str(os_release),
        versions=(
            1
            if versions is None
            else _positive_int(versions, "versions", definition_path)
        ),
        include=_name_list(data, "include", definition_path),
        exclude=_name_list(data, "exclude", definition_path),
        include_32bit=_flag(data, "include_32bit", definition_path),
        release_packages=release_packages or DEFAULT_RELEASE_PACKAGES,
        source_path=definition_path,
    )
