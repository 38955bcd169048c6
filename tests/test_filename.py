"""
Tests for rpmbaseline.versioning.filename module.

Tests filename parsing including:
- Standard name-major-minor.arch.ext filenames
- Dashed package names
- Update markers
- Lenient parsing of malformed names
"""

from __future__ import annotations

from pathlib import Path

import pytest

from rpmbaseline.versioning import PackageEntry, parse_package_path

pytestmark = pytest.mark.unit


class TestParsePackagePath:
    """Tests for parse_package_path()."""

    def test_standard_filename(self):
        """Test a typical binary package filename."""
        entry = parse_package_path(Path("/srv/os/httpd-2.4.6-18.el7.x86_64.rpm"))

        assert entry.name == "httpd"
        assert entry.major == "2.4.6"
        assert entry.minor == "18.el7"
        assert entry.arch == "x86_64"
        assert entry.ext == "rpm"
        assert entry.exact is True
        assert entry.source_path == Path("/srv/os/httpd-2.4.6-18.el7.x86_64.rpm")

    def test_dashed_name(self):
        """Test that leading dash segments are rejoined into the name."""
        entry = parse_package_path("python-devel-2.7.5-90.el7.x86_64.rpm")

        assert entry.name == "python-devel"
        assert entry.major == "2.7.5"
        assert entry.minor == "90.el7"

    def test_noarch(self):
        """Test a noarch package."""
        entry = parse_package_path("tzdata-2024a-1.el7.noarch.rpm")

        assert entry.arch == "noarch"
        assert entry.major == "2024a"

    def test_update_marker_dropped(self):
        """Test that an update marker before the extension is discarded."""
        entry = parse_package_path("glibc-2.17-317.el7.x86_64.update1.rpm")

        assert entry.arch == "x86_64"
        assert entry.minor == "317.el7"
        assert entry.ext == "rpm"
        assert entry.exact is True

    def test_update_marker_case_insensitive(self):
        """Test that the update marker match ignores case."""
        entry = parse_package_path("glibc-2.17-317.el7.x86_64.UPDATE.rpm")

        assert entry.arch == "x86_64"

    def test_filename_property_rebuilds_basename(self):
        """Test that filename reproduces a well-formed basename."""
        name = "bash-4.2.46-34.el7.x86_64.rpm"
        assert parse_package_path(name).filename == name

    def test_filename_property_omits_update_marker(self):
        """Test that the canonical filename has no update marker."""
        entry = parse_package_path("glibc-2.17-317.el7.x86_64.update1.rpm")
        assert entry.filename == "glibc-2.17-317.el7.x86_64.rpm"

    def test_group(self):
        """Test the (name, arch) grouping key."""
        entry = parse_package_path("bash-4.2.46-34.el7.x86_64.rpm")
        assert entry.group == ("bash", "x86_64")

    def test_positional_split_limitation(self):
        """Test that only the last two dashes delimit versions."""
        entry = parse_package_path("foo-2-bar-1.0-1.noarch.rpm")

        assert entry.name == "foo-2-bar"
        assert entry.major == "1.0"
        assert entry.minor == "1"


class TestLenientParsing:
    """Tests for malformed filenames."""

    def test_no_dashes(self):
        """Test a filename without any dash."""
        entry = parse_package_path("noversion.rpm")

        assert entry.name == ""
        assert entry.major == ""
        assert entry.minor == ""
        assert entry.arch == "noversion"
        assert entry.ext == "rpm"
        assert entry.exact is False

    def test_single_dash(self):
        """Test a filename with a single dash."""
        entry = parse_package_path("foo-1.rpm")

        assert entry.name == ""
        assert entry.major == "foo"
        assert entry.exact is False

    def test_missing_arch(self):
        """Test a filename whose last segment has no arch token."""
        entry = parse_package_path("foo-1.0-rpm")

        assert entry.name == "foo"
        assert entry.major == "1.0"
        assert entry.ext == "rpm"
        assert entry.arch == ""
        assert entry.minor == ""
        assert entry.exact is False

    def test_never_raises(self):
        """Test that odd inputs produce entries rather than errors."""
        for name in ["-", "--", ".rpm", "a-b-c", "x-y-.rpm"]:
            assert isinstance(parse_package_path(name), PackageEntry)
