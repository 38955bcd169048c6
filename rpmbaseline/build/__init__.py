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
Baseline tree output for rpmbaseline.

This package writes everything under ``baseline_dir/<name>``: package links,
repository metadata (via createrepo), optional signatures (via gpg), zypper
descriptors, the client repository snippet and the run record.

Example:
    from pathlib import Path
    from rpmbaseline.build import index_tree, materialize, prepare_tree

    tree = prepare_tree(Path("/srv/baselines/el7-2024q1"))
    materialize(retained, tree)
    index_tree(tree, "createrepo_c", workers=4)
"""

from .descriptors import (
    write_repo_file,
    write_run_record,
    write_zypper_descriptors,
)
from .indexer import index_tree, sign_file
from .materializer import materialize, prepare_tree, target_path

__all__ = [
    "index_tree",
    "materialize",
    "prepare_tree",
    "sign_file",
    "target_path",
    "write_repo_file",
    "write_run_record",
    "write_zypper_descriptors",
]
