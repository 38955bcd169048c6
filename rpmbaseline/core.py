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

"""Core orchestration for rpmbaseline.

This module provides high-level orchestration functions that coordinate the
complete workflow for selecting, ranking and materializing a baseline.

Build Pipeline:

1. Load the main configuration and the baseline definition
2. Select candidates from every source directory (cutoff, markers, names)
3. Rank the pooled candidates and keep the newest N per (name, arch)
4. Link the retained packages into ``baseline_dir/<name>``
5. Run the indexer over the tree, write zypper descriptors, sign metadata
6. Write the run record and the client repository snippet

Design Principles:

- Configuration records are immutable; CLI overrides produce new records
  via dataclasses.replace
- Functions return structured data (dataclasses) for easy testing
- Error handling uses exceptions; the CLI layer formats them for display
- The run is single-threaded and aborts on the first fatal error

Example:
    Programmatic usage:
        ```python
        from pathlib import Path
        from rpmbaseline.core import build_baseline

        result = build_baseline(
            Path("baselines/el7-2024q1.yaml"),
            config_path=Path("config.yaml"),
            versions=2,
        )
        print(f"{result.retained} packages retained in {result.tree}")
        ```

"""

from __future__ import annotations

from dataclasses import replace
from pathlib import Path

from rpmbaseline import __version__
from rpmbaseline.build import (
    index_tree,
    materialize,
    prepare_tree,
    sign_file,
    write_repo_file,
    write_run_record,
    write_zypper_descriptors,
)
from rpmbaseline.config import (
    DEFAULT_CONFIG_PATH,
    BaselineDefinition,
    MainConfig,
    load_baseline_definition,
    load_main_config,
)
from rpmbaseline.exceptions import ConfigError
from rpmbaseline.logging import get_global_logger
from rpmbaseline.results import BuildResult, SelectionResult
from rpmbaseline.selection import (
    SelectionPolicy,
    parse_cutoff_date,
    retain_newest,
    select_candidates,
)
from rpmbaseline.versioning import is_redhat_family

REPOMD_FILE = Path("repodata") / "repomd.xml"


def apply_overrides(
    baseline: BaselineDefinition,
    *,
    date: str | None = None,
    versions: int | None = None,
    include_32bit: bool = False,
) -> BaselineDefinition:
    """Return a copy of a definition with run-time overrides applied.

    Args:
        baseline: Definition as loaded from disk.
        date: Cutoff date replacing the date of every source directory.
        versions: Retention count replacing the definition's ``versions``.
        include_32bit: Keep 32-bit packages even if the definition does not.

    Returns:
        The definition itself when nothing is overridden, otherwise a new
            record.

    Raises:
        MalformedInputError: If date is not in YYYY-MM-DD form.
        ConfigError: If versions is less than 1.
    """
    changes: dict = {}
    if date is not None:
        cutoff = parse_cutoff_date(date)
        changes["rpm_dirs"] = tuple(
            replace(source, cutoff=cutoff) for source in baseline.rpm_dirs
        )
    if versions is not None:
        if versions < 1:
            raise ConfigError(f"versions must be at least 1, got {versions}")
        changes["versions"] = versions
    if include_32bit:
        changes["include_32bit"] = True
    return replace(baseline, **changes) if changes else baseline


def build_policy(baseline: BaselineDefinition) -> SelectionPolicy:
    """Build the selection policy for one run from a baseline definition."""
    return SelectionPolicy(
        sources=baseline.rpm_dirs,
        max_versions=baseline.versions,
        include=baseline.include,
        exclude=baseline.exclude,
        os_release=baseline.os_release,
        release_packages=baseline.release_packages,
        include_32bit=baseline.include_32bit,
        normalize=is_redhat_family(baseline.platform),
    )


def _load(
    definition_path: Path, config_path: Path
) -> tuple[MainConfig, BaselineDefinition]:
    main_config = load_main_config(config_path)
    baseline = load_baseline_definition(definition_path, main_config)
    return main_config, baseline


def _select(baseline: BaselineDefinition) -> SelectionResult:
    logger = get_global_logger()
    policy = build_policy(baseline)
    if policy.normalize:
        logger.verbose(
            "RANK", f"{baseline.platform}: comparing releases without elN markers"
        )

    candidates = select_candidates(policy)
    logger.verbose("SELECT", f"{len(candidates)} candidate(s) in total")

    retained = retain_newest(
        candidates, policy.max_versions, normalize=policy.normalize
    )
    logger.verbose(
        "RANK",
        f"Retained {len(retained)} package(s), up to {policy.max_versions} per group",
    )
    return SelectionResult(
        name=baseline.name, candidates=len(candidates), retained=retained
    )


def select_baseline(
    definition_path: Path,
    *,
    config_path: Path = DEFAULT_CONFIG_PATH,
    date: str | None = None,
    versions: int | None = None,
    include_32bit: bool = False,
) -> SelectionResult:
    """Select and rank the packages of a baseline without writing anything.

    This is the entry point for the 'rpmbaseline list' command.

    Args:
        definition_path: Path to the baseline definition YAML file.
        config_path: Path to the main configuration YAML file.
        date: Cutoff date override for every source directory.
        versions: Retention count override.
        include_32bit: Keep 32-bit packages.

    Returns:
        SelectionResult with the candidate count and the retained entries
            in ranking order.

    Raises:
        ConfigError: On missing or invalid configuration.
        MalformedInputError: On a malformed cutoff date.
        FilesystemError: If a source directory is missing.
    """
    logger = get_global_logger()

    logger.step(1, 2, "Loading configuration...")
    _, baseline = _load(definition_path, config_path)
    baseline = apply_overrides(
        baseline, date=date, versions=versions, include_32bit=include_32bit
    )

    logger.step(2, 2, "Selecting packages...")
    return _select(baseline)


def build_baseline(
    definition_path: Path,
    *,
    config_path: Path = DEFAULT_CONFIG_PATH,
    date: str | None = None,
    versions: int | None = None,
    workers: int | None = None,
    include_32bit: bool = False,
    clean: bool = True,
    index: bool = True,
) -> BuildResult:
    """Build a baseline repository tree end to end.

    This is the main entry point for the 'rpmbaseline build' command.

    Args:
        definition_path: Path to the baseline definition YAML file.
        config_path: Path to the main configuration YAML file. Default is
            /etc/rpmbaseline/config.yaml.
        date: Cutoff date override for every source directory.
        versions: Retention count override.
        workers: Indexer worker-count override.
        include_32bit: Keep 32-bit packages.
        clean: Remove an existing tree before linking. Default is True.
        index: Run the indexer (and signer). Default is True.

    Returns:
        BuildResult describing the finished tree.

    Raises:
        ConfigError: On missing or invalid configuration.
        MalformedInputError: On a malformed cutoff date.
        FilesystemError: On missing source directories, unwritable output or
            a missing external tool.
        ExternalToolError: If the indexer or signer exits non-zero.

    Example:
        Rebuild without reindexing:
            ```python
            result = build_baseline(Path("el7.yaml"), index=False)
            print(result.linked, result.skipped)
            ```

    """
    logger = get_global_logger()
    total = 5

    # 1. Configuration
    logger.step(1, total, "Loading configuration...")
    main_config, baseline = _load(definition_path, config_path)
    baseline = apply_overrides(
        baseline, date=date, versions=versions, include_32bit=include_32bit
    )
    if workers is not None:
        if workers < 1:
            raise ConfigError(f"workers must be at least 1, got {workers}")
        main_config = replace(main_config, workers=workers)

    # 2. Selection and retention
    logger.step(2, total, "Selecting packages...")
    selection = _select(baseline)

    # 3. Links
    logger.step(3, total, "Linking packages...")
    tree = prepare_tree(main_config.baseline_dir / baseline.name, clean=clean)
    linked = materialize(selection.retained, tree, link_type=main_config.link_type)

    # 4. Metadata
    signed: list[Path] = []
    if index:
        logger.step(4, total, "Indexing repository...")
        index_tree(tree, main_config.createrepo_cmd, main_config.workers)
        if baseline.repo_type == "zypper":
            write_zypper_descriptors(tree, baseline, main_config, linked.arches)
            if main_config.gpg_key:
                signed.append(tree / "content")
        elif main_config.gpg_key:
            sign_file(tree / REPOMD_FILE, main_config.gpg_key)
            signed.append(tree / REPOMD_FILE)
        if not main_config.gpg_key:
            logger.verbose("SIGN", "No gpg_key configured, skipping signing")
    else:
        logger.step(4, total, "Skipping indexing (--no-index)")

    # 5. Record and client snippet
    logger.step(5, total, "Writing repository files...")
    record_file = write_run_record(
        tree,
        baseline,
        main_config,
        options={
            "date": None if date is None else str(date),
            "versions": versions,
            "workers": workers,
            "include_32bit": include_32bit,
            "clean": clean,
            "index": index,
        },
        counts={
            "candidates": selection.candidates,
            "retained": len(selection.retained),
            "linked": linked.linked,
            "skipped": linked.skipped,
        },
        tool_version=__version__,
    )
    repo_file = write_repo_file(tree, baseline, main_config, signed=bool(signed))

    return BuildResult(
        name=baseline.name,
        tree=tree,
        candidates=selection.candidates,
        retained=len(selection.retained),
        linked=linked.linked,
        skipped=linked.skipped,
        indexed=index,
        signed=signed,
        repo_file=repo_file,
        record_file=record_file,
        status="success",
    )
