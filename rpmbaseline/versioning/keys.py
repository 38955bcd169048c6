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

"""Core version comparison utilities for rpmbaseline.

This module is format-agnostic: it does NOT read files. It only compares the
version and release strings parsed out of package filenames.

Comparison Rules:
    1. Optional normalization (Red-Hat family release strings only): a dot
       token like ``el7_9`` loses its ``el7_`` marker and becomes ``9``; a
       bare ``el7`` token becomes ``0``.
    2. Both strings are split on ``.``.
    3. The shorter token list is padded with ``"0"`` tokens. The pad length
       is ``abs(len(a) - len(b)) + 1``, one token more than needed; the
       comparison walks the pairs with ``zip`` so the extra token is never
       reached.
    4. Tokens are compared pairwise. All-decimal pairs compare as integers
       with leading zeros stripped; any other pair is uppercased and
       compared as strings. The first differing pair decides.

Example:
    Numeric tokens compare numerically:
        ```python
        from rpmbaseline.versioning import compare_versions

        compare_versions("1.10", "1.9")  # Returns: 1
        compare_versions("1.2", "1.2.0")  # Returns: 0
        compare_versions("5.el7", "5", normalize=True)  # Returns: 0
        ```
"""

from __future__ import annotations

from functools import cmp_to_key
import re
from typing import Any, Callable

# ----------------------------
# Normalization
# ----------------------------

_EL_MARKER_WITH_SUFFIX = re.compile(r"^el\d+_", re.IGNORECASE)
_EL_MARKER_BARE = re.compile(r"^el\d+$", re.IGNORECASE)

# Platform name prefixes of Red-Hat-derived distributions
_REDHAT_FAMILY = (
    "rhel",
    "redhat",
    "centos",
    "el",
    "rocky",
    "alma",
    "oracle",
    "ol",
    "scientific",
    "sl",
)


def is_redhat_family(platform: str) -> bool:
    """Decide whether a target platform name is Red-Hat-derived.

    Only Red-Hat-derived platforms carry ``elN`` release markers, so release
    normalization is enabled for them alone.

    Args:
        platform: Platform name from the baseline definition
            (e.g., "rhel7", "centos-8", "sles12").

    Returns:
        True if the platform name starts with a known Red-Hat family prefix
            followed by a digit, separator, or end of string.
    """
    p = platform.strip().lower()
    for prefix in _REDHAT_FAMILY:
        if p.startswith(prefix):
            rest = p[len(prefix) :]
            if not rest or rest[0].isdigit() or rest[0] in "-_ .":
                return True
    # Full names such as "almalinux8" or "oraclelinux7"
    return p.startswith(("almalinux", "oraclelinux", "rockylinux"))


def normalize_release(version: str) -> str:
    """Strip enterprise-linux release markers from a release string.

    Args:
        version: Dotted release string (e.g., "18.el7_9.1").

    Returns:
        The release string with each ``elN_`` prefix removed and each bare
            ``elN`` token replaced by ``0`` (e.g., "18.9.1").
    """
    tokens: list[str] = []
    for token in version.split("."):
        if _EL_MARKER_WITH_SUFFIX.match(token):
            tokens.append(_EL_MARKER_WITH_SUFFIX.sub("", token, count=1))
        elif _EL_MARKER_BARE.match(token):
            tokens.append("0")
        else:
            tokens.append(token)
    return ".".join(tokens)


# ----------------------------
# Comparison core
# ----------------------------


def _pad_tokens(a: list[str], b: list[str]) -> tuple[list[str], list[str]]:
    """Pad the shorter token list with "0" tokens.

    Equal-length lists are returned unchanged.
    """
    if len(a) == len(b):
        return a, b
    pad = ["0"] * (abs(len(a) - len(b)) + 1)
    if len(a) < len(b):
        return a + pad, b
    return a, b + pad


def _compare_tokens(x: str, y: str) -> int:
    """Compare a single pair of version tokens."""
    if x.isdecimal() and y.isdecimal():
        xi = int(x.lstrip("0") or "0")
        yi = int(y.lstrip("0") or "0")
        return (xi > yi) - (xi < yi)
    xu, yu = x.upper(), y.upper()
    return (xu > yu) - (xu < yu)


def compare_versions(a: str, b: str, *, normalize: bool = False) -> int:
    """Compare two dotted version strings.

    Args:
        a: First version string.
        b: Second version string.
        normalize: Strip ``elN`` release markers first. Used for release
            strings of Red-Hat-derived platforms only.

    Returns:
        -1 if a < b, 0 if equal, 1 if a > b.

    Example:
        Release strings with distribution markers:
            ```python
            compare_versions("18.el7", "6.el7", normalize=True)  # Returns: 1
            compare_versions("5.el7_9", "5.9", normalize=True)   # Returns: 0
            ```
    """
    if normalize:
        a = normalize_release(a)
        b = normalize_release(b)

    ta, tb = _pad_tokens(a.split("."), b.split("."))
    for x, y in zip(ta, tb):
        result = _compare_tokens(x, y)
        if result:
            return result
    return 0


def version_sort_key(*, normalize: bool = False) -> Callable[[str], Any]:
    """Build a ``sorted()`` key that orders version strings ascending.

    Args:
        normalize: Passed through to compare_versions().

    Returns:
        A key function suitable for ``sorted(..., key=...)``.

    Example:
        Newest first:
            ```python
            sorted(["1.9", "1.10", "1.2"], key=version_sort_key(), reverse=True)
            # ['1.10', '1.9', '1.2']
            ```
    """

    def _cmp(a: str, b: str) -> int:
        return compare_versions(a, b, normalize=normalize)

    return cmp_to_key(_cmp)
