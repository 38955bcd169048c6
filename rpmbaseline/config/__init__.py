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

"""Configuration loading for rpmbaseline.

This module provides tools for loading the main configuration file and
baseline definition files into frozen records:

  - MainConfig: site-wide paths, indexer command and signing settings
  - BaselineDefinition: one baseline's sources, cutoffs and policy

The main configuration's ``defaults`` mapping is deep-merged under every
definition (dicts merge recursively, lists and scalars are replaced).

Example:
    Basic usage:
        ```python
        from pathlib import Path
        from rpmbaseline.config import load_baseline_definition, load_main_config

        main = load_main_config(Path("config.yaml"))
        baseline = load_baseline_definition(Path("baselines/el7.yaml"), main)
        ```
"""

from .loader import (
    DEFAULT_CONFIG_PATH,
    BaselineDefinition,
    MainConfig,
    load_baseline_definition,
    load_main_config,
)

__all__ = [
    "DEFAULT_CONFIG_PATH",
    "BaselineDefinition",
    "MainConfig",
    "load_baseline_definition",
    "load_main_config",
]
