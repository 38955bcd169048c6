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

"""Descriptor files written alongside a baseline tree.

Files:
    - ``content``, ``media.1/media``, ``directory.yast``: zypper/YaST media
      descriptors, written for ``type: zypper`` baselines only
    - ``<name>.repo``: client repository snippet pointing at the served tree
    - ``baseline-info.yaml``: human-readable record of the run

Layouts:
    ``content`` holds fixed ``KEY value`` lines followed by one
    ``META SHA256 <digest>  <path>`` line per file under ``repodata/``.
    ``media.1/media`` holds the vendor, a ``YYYYMMDDHHMMSS`` timestamp and
    the media number ``1``. ``directory.yast`` lists the tree root, sorted,
    with a trailing ``/`` on directories.
"""

from __future__ import annotations

from datetime import datetime
import hashlib
from pathlib import Path
from typing import Any

import yaml

from rpmbaseline.config import BaselineDefinition, MainConfig
from rpmbaseline.exceptions import FilesystemError
from rpmbaseline.logging import get_global_logger

CONTENT_FILE = "content"
MEDIA_FILE = Path("media.1") / "media"
DIRECTORY_FILE = "directory.yast"
RECORD_FILE = "baseline-info.yaml"
REPODATA_DIR = "repodata"


def _sha256(path: Path) -> str:
    digest = hashlib.sha256()
    with path.open("rb") as f:
        for chunk in iter(lambda: f.read(1024 * 1024), b""):
            digest.update(chunk)
    return digest.hexdigest()


def _write_text(path: Path, text: str) -> Path:
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding="utf-8")
    except OSError as err:
        raise FilesystemError(f"Cannot write {path}: {err}") from err
    return path


def write_content_file(
    tree: Path,
    baseline: BaselineDefinition,
    main_config: MainConfig,
    arches: list[str],
) -> Path:
    """Write the zypper ``content`` descriptor.

    Args:
        tree: Baseline tree root, already indexed.
        baseline: Baseline definition.
        main_config: Main configuration (for the vendor name).
        arches: Architectures present in the tree.

    Returns:
        Path to the written file.
    """
    fields = [
        ("CONTENTSTYLE", "11"),
        ("NAME", baseline.name),
        ("VERSION", baseline.os_release or ""),
        ("LABEL", baseline.description),
        ("VENDOR", main_config.company or ""),
        ("BASEARCHS", " ".join(arches)),
        ("DATADIR", "RPMS"),
    ]
    lines = [f"{key:<13}{value}".rstrip() for key, value in fields]

    repodata = tree / REPODATA_DIR
    if repodata.is_dir():
        for path in sorted(p for p in repodata.rglob("*") if p.is_file()):
            rel = path.relative_to(tree).as_posix()
            lines.append(f"META SHA256 {_sha256(path)}  {rel}")

    return _write_text(tree / CONTENT_FILE, "\n".join(lines) + "\n")


def write_media_file(
    tree: Path, main_config: MainConfig, baseline: BaselineDefinition, now: datetime
) -> Path:
    """Write ``media.1/media`` (vendor, timestamp, media count)."""
    vendor = main_config.company or baseline.name
    text = f"{vendor}\n{now.strftime('%Y%m%d%H%M%S')}\n1\n"
    return _write_text(tree / MEDIA_FILE, text)


def write_directory_yast(tree: Path) -> Path:
    """Write ``directory.yast`` listing the tree root."""
    names = []
    for item in sorted(tree.iterdir(), key=lambda p: p.name):
        if item.name == DIRECTORY_FILE:
            continue
        names.append(f"{item.name}/" if item.is_dir() else item.name)
    return _write_text(tree / DIRECTORY_FILE, "".join(f"{n}\n" for n in names))


def write_zypper_descriptors(
    tree: Path,
    baseline: BaselineDefinition,
    main_config: MainConfig,
    arches: list[str],
    *,
    now: datetime | None = None,
) -> list[Path]:
    """Write all zypper descriptors, signing ``content`` when a key is set.

    Signing happens before ``directory.yast`` is written so the signature
    file is listed.

    Args:
        tree: Baseline tree root, already indexed.
        baseline: Baseline definition.
        main_config: Main configuration.
        arches: Architectures present in the tree.
        now: Timestamp for ``media.1/media``. Default is the current time.

    Returns:
        Paths of the files written, signature included.

    Raises:
        FilesystemError: If a descriptor cannot be written.
        ExternalToolError: If signing fails.
    """
    from .indexer import sign_file

    logger = get_global_logger()
    now = now or datetime.now()

    written = [write_content_file(tree, baseline, main_config, arches)]
    if main_config.gpg_key:
        sign_file(written[0], main_config.gpg_key)
        written.append(written[0].with_name(CONTENT_FILE + ".asc"))
    written.append(write_media_file(tree, main_config, baseline, now))
    written.append(write_directory_yast(tree))

    logger.verbose("DESCR", f"[OK] Wrote {len(written)} zypper descriptor file(s)")
    return written


def repo_base_url(tree: Path, main_config: MainConfig, name: str) -> str:
    """Compute the URL at which a baseline tree is served.

    Args:
        tree: Baseline tree root.
        main_config: Main configuration (served directory and URI).
        name: Baseline name, used when the tree is not under the served
            directory.

    Returns:
        ``http_server_uri`` joined with the tree path relative to
            ``http_served_from``, or ``http_server_uri/<name>`` as fallback.
    """
    base = main_config.http_server_uri.rstrip("/")
    try:
        rel = tree.resolve().relative_to(main_config.http_served_from.resolve())
    except ValueError:
        get_global_logger().warning(
            "DESCR",
            f"{tree} is not under http_served_from "
            f"({main_config.http_served_from}); using {base}/{name}",
        )
        return f"{base}/{name}"
    return f"{base}/{rel.as_posix()}" if rel.parts else base


def write_repo_file(
    tree: Path,
    baseline: BaselineDefinition,
    main_config: MainConfig,
    *,
    signed: bool = False,
) -> Path:
    """Write the ``<name>.repo`` client snippet.

    Args:
        tree: Baseline tree root.
        baseline: Baseline definition.
        main_config: Main configuration.
        signed: Whether repository metadata was signed.

    Returns:
        Path to the written snippet.
    """
    lines = [
        f"[{baseline.name}]",
        f"name={baseline.description}",
        f"baseurl={repo_base_url(tree, main_config, baseline.name)}",
        "enabled=1",
        "gpgcheck=0",
    ]
    if signed:
        lines.append("repo_gpgcheck=1")
    if baseline.repo_type == "zypper":
        lines += ["type=rpm-md", "autorefresh=0"]

    return _write_text(tree / f"{baseline.name}.repo", "\n".join(lines) + "\n")


def write_run_record(
    tree: Path,
    baseline: BaselineDefinition,
    main_config: MainConfig,
    *,
    options: dict[str, Any],
    counts: dict[str, int],
    tool_version: str,
    now: datetime | None = None,
) -> Path:
    """Write ``baseline-info.yaml``, a record of how the tree was built.

    Args:
        tree: Baseline tree root.
        baseline: Effective baseline definition (overrides applied).
        main_config: Main configuration.
        options: Effective run options (CLI flags).
        counts: Selection and linking counts.
        tool_version: rpmbaseline version string.
        now: Build timestamp. Default is the current time.

    Returns:
        Path to the written record.
    """
    now = now or datetime.now()
    record = {
        "built_at": now.isoformat(timespec="seconds"),
        "rpmbaseline_version": tool_version,
        "baseline": {
            "name": baseline.name,
            "description": baseline.description,
            "platform": baseline.platform,
            "type": baseline.repo_type,
            "os_release": baseline.os_release,
            "versions": baseline.versions,
            "include_32bit": baseline.include_32bit,
            "include": list(baseline.include),
            "exclude": list(baseline.exclude),
            "rpm_dirs": [
                {"dir": str(s.path), "date": s.cutoff.isoformat()}
                for s in baseline.rpm_dirs
            ],
            "definition": str(baseline.source_path) if baseline.source_path else None,
        },
        "config": {
            "baseline_dir": str(main_config.baseline_dir),
            "http_served_from": str(main_config.http_served_from),
            "http_server_uri": main_config.http_server_uri,
            "createrepo_cmd": main_config.createrepo_cmd,
            "workers": main_config.workers,
            "company": main_config.company,
            "link_type": main_config.link_type,
            "signed": bool(main_config.gpg_key),
        },
        "options": options,
        "counts": counts,
    }
    text = yaml.safe_dump(record, default_flow_style=False, sort_keys=False)
    return _write_text(tree / RECORD_FILE, text)
