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

"""External indexing and signing tools for rpmbaseline.

The baseline tree is indexed by createrepo (or createrepo_c) and, when a
key is configured, its metadata is signed with gpg. Both run synchronously
as child processes; nothing is assumed about them beyond the exit status
and captured output.

Design Principles:
    - The createrepo command line comes from the main configuration and is
      split with shlex, so extra flags can be configured there
    - The worker-count hint is passed through verbatim as ``--workers N``
    - A missing executable raises FilesystemError
    - A non-zero exit raises ExternalToolError carrying the tool output

Example:
    Index and sign a tree:
        ```python
        from pathlib import Path
        from rpmbaseline.build import index_tree, sign_file

        tree = Path("/srv/baselines/el7-2024q1")
        index_tree(tree, "createrepo_c --database", workers=4)
        sign_file(tree / "repodata" / "repomd.xml", "ABCD1234")
        ```
"""

from __future__ import annotations

from pathlib import Path
import shlex
import shutil
import subprocess

from rpmbaseline.exceptions import ConfigError, ExternalToolError, FilesystemError
from rpmbaseline.logging import get_global_logger
from rpmbaseline.results import ToolResult

GPG_CMD = "gpg"


def _run_tool(cmd: list[str], prefix: str, timeout: float | None = None) -> ToolResult:
    """Run an external tool and capture its output.

    Args:
        cmd: Command line, executable first.
        prefix: Logger prefix for this tool.
        timeout: Seconds before the tool is killed. None waits forever.

    Returns:
        ToolResult for a zero exit status.

    Raises:
        FilesystemError: If the executable cannot be found.
        ExternalToolError: If the tool exits non-zero or times out.
    """
    logger = get_global_logger()

    if shutil.which(cmd[0]) is None:
        raise FilesystemError(f"Executable not found: {cmd[0]}")

    logger.verbose(prefix, f"Running: {' '.join(cmd)}")

    try:
        result = subprocess.run(
            cmd,
            capture_output=True,
            text=True,
            check=True,
            timeout=timeout,
        )
    except subprocess.CalledProcessError as err:
        output = (err.stdout or "") + (err.stderr or "")
        raise ExternalToolError(
            f"{Path(cmd[0]).name} failed (exit code {err.returncode})",
            returncode=err.returncode,
            output=output,
        ) from err
    except subprocess.TimeoutExpired as err:
        raise ExternalToolError(
            f"{Path(cmd[0]).name} timed out after {err.timeout}s"
        ) from err
    except OSError as err:
        raise FilesystemError(f"Cannot run {cmd[0]}: {err}") from err

    output = (result.stdout or "") + (result.stderr or "")
    for line in output.strip().splitlines():
        logger.debug(prefix, f"  {line}")

    return ToolResult(command=cmd, returncode=result.returncode, output=output)


def index_tree(
    tree: Path,
    createrepo_cmd: str,
    workers: int | None = None,
    timeout: float | None = None,
) -> ToolResult:
    """Generate repository metadata for a baseline tree.

    Args:
        tree: Baseline tree root.
        createrepo_cmd: Indexer command line from the main configuration.
        workers: Worker-count hint, passed as ``--workers N`` when set.
        timeout: Seconds before the indexer is killed. Default waits forever.

    Returns:
        ToolResult with the captured indexer output.

    Raises:
        ConfigError: If createrepo_cmd is empty.
        FilesystemError: If the indexer executable cannot be found.
        ExternalToolError: If the indexer exits non-zero.
    """
    cmd = shlex.split(createrepo_cmd)
    if not cmd:
        raise ConfigError("createrepo_cmd is empty")
    if workers is not None:
        cmd += ["--workers", str(workers)]
    cmd.append(str(tree))

    result = _run_tool(cmd, "INDEX", timeout=timeout)
    get_global_logger().verbose("INDEX", f"[OK] Indexed {tree}")
    return result


def sign_file(path: Path, key: str, timeout: float | None = 300) -> ToolResult:
    """Write an ASCII-armored detached signature next to a file.

    Args:
        path: File to sign; the signature is written to ``<path>.asc``.
        key: gpg key id or user id to sign with.
        timeout: Seconds before gpg is killed. Default is 300.

    Returns:
        ToolResult with the captured gpg output.

    Raises:
        FilesystemError: If the file or the gpg executable is missing.
        ExternalToolError: If gpg exits non-zero.
    """
    if not path.exists():
        raise FilesystemError(f"Cannot sign missing file: {path}")

    cmd = [
        GPG_CMD,
        "--batch",
        "--yes",
        "--armor",
        "--detach-sign",
        "--local-user",
        key,
        str(path),
    ]
    result = _run_tool(cmd, "SIGN", timeout=timeout)
    get_global_logger().verbose("SIGN", f"[OK] Signed {path.name}")
    return result
