"""
Tests for baseline definition validation module.

This module tests the validation functionality that checks baseline
definitions without walking source trees or running external tools.
"""

from __future__ import annotations

from rpmbaseline.validation import validate_baseline


def _write(path, text):
    path.write_text(text)
    return path


class TestValidateBaseline:
    """Tests for validate_baseline function."""

    def test_valid_definition(self, tmp_path):
        """Test that a complete definition passes validation."""
        (tmp_path / "repo").mkdir()
        definition = _write(
            tmp_path / "el7.yaml",
            """
name: el7-2024q1
description: "EL7 2024 Q1"
platform: rhel7
type: yum
os_release: "7"
versions: 2
rpm_dirs:
  - dir: repo
    date: "2024-03-31"
""",
        )

        result = validate_baseline(definition)

        assert result.status == "valid"
        assert result.source_count == 1
        assert result.errors == []
        assert result.warnings == []

    def test_missing_file(self, tmp_path):
        """Test that a missing file is reported as invalid."""
        result = validate_baseline(tmp_path / "missing.yaml")

        assert result.status == "invalid"
        assert "not found" in result.errors[0]

    def test_invalid_yaml_syntax(self, tmp_path):
        """Test that YAML syntax errors are reported."""
        definition = _write(tmp_path / "el7.yaml", "name: [unclosed\n")

        result = validate_baseline(definition)

        assert result.status == "invalid"
        assert "Invalid YAML syntax" in result.errors[0]

    def test_empty_file(self, tmp_path):
        """Test that an empty file is not a mapping."""
        definition = _write(tmp_path / "el7.yaml", "")

        result = validate_baseline(definition)

        assert result.status == "invalid"
        assert "dictionary" in result.errors[0]

    def test_missing_required_fields(self, tmp_path):
        """Test that every missing required field is listed."""
        definition = _write(tmp_path / "el7.yaml", "description: nothing\n")

        result = validate_baseline(definition)

        assert result.status == "invalid"
        for field in ["name", "platform", "type", "rpm_dirs"]:
            assert f"Missing required field: {field}" in result.errors

    def test_invalid_type_and_versions(self, tmp_path):
        """Test that bad field values are reported together."""
        definition = _write(
            tmp_path / "el7.yaml",
            """
name: el7
platform: rhel7
type: apt
versions: 0
rpm_dirs:
  - dir: /srv/os
    date: "2024-03-31"
""",
        )

        result = validate_baseline(definition)

        assert result.status == "invalid"
        assert any("'type'" in e for e in result.errors)
        assert any("'versions'" in e for e in result.errors)

    def test_quoted_boolean_and_count_rejected(self, tmp_path):
        """Test that quoted include_32bit and versions values are errors."""
        definition = _write(
            tmp_path / "el7.yaml",
            """
name: el7
platform: rhel7
type: yum
versions: "2"
include_32bit: "false"
rpm_dirs:
  - dir: /srv/os
    date: "2024-03-31"
""",
        )

        result = validate_baseline(definition)

        assert result.status == "invalid"
        assert any("'include_32bit'" in e for e in result.errors)
        assert any("'versions'" in e for e in result.errors)

    def test_bad_source_entries(self, tmp_path):
        """Test that each rpm_dirs entry is checked."""
        definition = _write(
            tmp_path / "el7.yaml",
            """
name: el7
platform: rhel7
type: yum
rpm_dirs:
  - dir: /srv/os
    date: "03/31/2024"
  - date: "2024-03-31"
  - just-a-string
""",
        )

        result = validate_baseline(definition)

        assert result.status == "invalid"
        assert result.source_count == 3
        assert any(e.startswith("rpm_dirs[0].date") for e in result.errors)
        assert "rpm_dirs[1]: Missing required field: dir" in result.errors
        assert "rpm_dirs[2]: Must be a dictionary" in result.errors

    def test_warnings_do_not_invalidate(self, tmp_path):
        """Test warning-only conditions."""
        definition = _write(
            tmp_path / "el7.yaml",
            """
name: el7
platform: rhel7
type: yum
os_release: 7.10
include: [httpd]
exclude: [bash]
colour: blue
rpm_dirs:
  - dir: does-not-exist
    date: "2024-03-31"
""",
        )

        result = validate_baseline(definition)

        assert result.status == "valid"
        assert "Unknown field: colour" in result.warnings
        assert any("'exclude' is ignored" in w for w in result.warnings)
        assert any("os_release" in w for w in result.warnings)
        assert any("Directory does not exist" in w for w in result.warnings)

    def test_main_config_defaults_applied(self, tmp_path, create_yaml_file, main_config_data):
        """Test that defaults from the main configuration fill required fields."""
        main_config_data["defaults"] = {"platform": "rhel7", "type": "yum"}
        config = create_yaml_file("config.yaml", main_config_data)
        definition = _write(
            tmp_path / "el7.yaml",
            """
name: el7
rpm_dirs:
  - dir: /srv/os
    date: "2024-03-31"
""",
        )

        result = validate_baseline(definition, config_path=config)

        assert result.status == "valid"

    def test_broken_main_config(self, tmp_path):
        """Test that a main configuration error invalidates the run."""
        definition = _write(tmp_path / "el7.yaml", "name: el7\n")

        result = validate_baseline(definition, config_path=tmp_path / "missing.yaml")

        assert result.status == "invalid"
        assert result.errors[0].startswith("Main configuration:")
