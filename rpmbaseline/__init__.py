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

"""
rpmbaseline: point-in-time RPM repository baselines.

rpmbaseline builds reproducible RPM repositories ("baselines") from one or
more directories of package files. Each source directory has a cutoff date;
files modified after it are ignored. The newest N versions of every package
are linked into a clean tree, which is then indexed with createrepo.

Features
--------
  - Filename-only package identification (no RPM headers are read)
  - Mixed numeric/alphabetic version comparison with elN release noise
    stripped on Red-Hat-derived platforms
  - Per-directory cutoff dates, include/exclude lists, OS release pinning
  - Symlink or hardlink trees, idempotent reruns
  - createrepo indexing, optional gpg signing, zypper media descriptors

Quick Start
-----------
Check a baseline definition:

    $ rpmbaseline validate baselines/el7-2024q1.yaml

Preview the packages a baseline would contain:

    $ rpmbaseline list baselines/el7-2024q1.yaml --versions 2

Build it:

    $ rpmbaseline build baselines/el7-2024q1.yaml

Package Structure
-----------------
cli : module
    Command-line interface with argparse.
core : module
    High-level orchestration functions.
config : package
    YAML configuration loading and merging.
versioning : package
    Filename parsing and version comparison.
selection : package
    Per-directory selection rules, ranking and retention.
build : package
    Tree materialization, indexing, signing and descriptor files.

Public API
----------
    from rpmbaseline.core import build_baseline, select_baseline
    from rpmbaseline.validation import validate_baseline
    from rpmbaseline.versioning import compare_versions, parse_package_path

Project Information
-------------------
Author: Roger Cibrian
License: Apache-2.0
"""

__version__ = "0.1.0"
__author__ = "Roger Cibrian"
__license__ = "Apache-2.0"
__description__ = "Point-in-time RPM repository baselines"

# Re-export commonly used functions for convenience
from rpmbaseline.config import load_baseline_definition, load_main_config
from rpmbaseline.core import build_baseline, select_baseline
from rpmbaseline.validation import validate_baseline
from rpmbaseline.versioning import (
    PackageEntry,
    compare_versions,
    parse_package_path,
)

__all__ = [
    "__version__",
    "__author__",
    "__license__",
    "__description__",
    "build_baseline",
    "select_baseline",
    "validate_baseline",
    "load_main_config",
    "load_baseline_definition",
    "compare_versions",
    "parse_package_path",
    "PackageEntry",
]
