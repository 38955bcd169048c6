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

"""Exception hierarchy for rpmbaseline.

This module defines a custom exception hierarchy that allows library users
to distinguish between different types of errors. All exceptions inherit from
BaselineError, allowing users to catch all rpmbaseline errors with a single
except clause if needed.

Every error is fatal to a build run: there is no retry policy anywhere. The
CLI reports the message to stderr and exits with status 1.

Example:
    Catching specific error types:
        ```python
        from rpmbaseline.core import build_baseline
        from rpmbaseline.exceptions import ConfigError, ExternalToolError

        try:
            result = build_baseline(Path("baselines/el7.yaml"))
        except ConfigError as e:
            print(f"Configuration error: {e}")
        except ExternalToolError as e:
            print(f"createrepo failed: {e}")
            print(e.output)
        ```

    Catching all rpmbaseline errors:
        ```python
        from rpmbaseline.exceptions import BaselineError

        try:
            result = build_baseline(Path("baselines/el7.yaml"))
        except BaselineError as e:
            print(f"Error: {e}")
        ```
"""

from __future__ import annotations

__all__ = [
    "BaselineError",
    "ConfigError",
    "FilesystemError",
    "MalformedInputError",
    "ExternalToolError",
]


class BaselineError(Exception):
    """Base exception for all rpmbaseline errors.

    All rpmbaseline-specific exceptions inherit from this class, allowing
    users to catch all rpmbaseline errors with a single except clause if
    needed.
    """

    pass


class ConfigError(BaselineError):
    """Raised for configuration-related errors.

    This exception is raised when there are problems with:

    - Missing or unreadable configuration files (main config or baseline
        definition)
    - YAML parse errors (syntax errors, non-mapping top level)
    - Missing required fields (e.g., no 'rpm_dirs', no 'baseline_dir')
    - Invalid field values (unknown repository type, versions < 1)

    Example:
        Catching configuration errors:
            ```python
            from rpmbaseline.config import load_main_config
            from rpmbaseline.exceptions import ConfigError

            try:
                config = load_main_config(Path("/etc/rpmbaseline/config.yaml"))
            except ConfigError as e:
                print(f"Config error: {e}")
            ```
    """

    pass


class FilesystemError(BaselineError):
    """Raised for filesystem-related errors.

    This exception is raised when there are problems with:

    - Unwritable or uncreatable output directories
    - Link creation failures while materializing the baseline tree
    - Missing source directories
    - Missing external tool executables (createrepo, gpg)
    """

    pass


class MalformedInputError(BaselineError):
    """Raised for malformed operator-supplied input.

    Package filenames are parsed leniently and never raise this error. It is
    reserved for values an operator typed, such as cutoff dates that do not
    match the fixed YYYY-MM-DD pattern.
    """

    pass


class ExternalToolError(BaselineError):
    """Raised when an external tool exits with a non-zero status.

    Attributes:
        returncode: Exit status of the tool.
        output: Captured stdout and stderr of the tool, for display to the
            operator.

    Example:
        Surfacing tool output:
            ```python
            try:
                index_tree(tree, "createrepo_c", workers=4)
            except ExternalToolError as e:
                print(f"Exit code {e.returncode}")
                print(e.output)
            ```
    """

    def __init__(self, message: str, returncode: int = 1, output: str = "") -> None:
        super().__init__(message)
        self.returncode = returncode
        self.output = output
