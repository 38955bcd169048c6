"""
Tests for rpmbaseline.core module.

Tests core orchestration including:
- End-to-end builds on a temporary package tree
- Run-time overrides (date, versions, workers, 32-bit)
- Indexing and signing hand-off (mocked)
- zypper descriptor generation
- Error propagation

The external indexer and signer are mocked; everything else touches the
real filesystem under tmp_path.
"""

from __future__ import annotations

from datetime import date
import os
from pathlib import Path
from unittest.mock import patch

import pytest
import yaml

from rpmbaseline.config import load_baseline_definition
from rpmbaseline.core import (
    apply_overrides,
    build_baseline,
    build_policy,
    select_baseline,
)
from rpmbaseline.exceptions import ConfigError, FilesystemError, MalformedInputError

pytestmark = pytest.mark.integration

HTTPD_OLD = "httpd-2.4.6-6.el7.x86_64.rpm"
HTTPD_NEW = "httpd-2.4.6-18.el7.x86_64.rpm"


@pytest.fixture
def setup(
    tmp_test_dir,
    create_yaml_file,
    create_package,
    old_mtime,
    main_config_data,
    baseline_data,
):
    """Create a repo with two httpd releases plus config files."""
    repo = tmp_test_dir / "repo"
    create_package(repo, HTTPD_OLD, mtime=old_mtime)
    create_package(repo, HTTPD_NEW, mtime=old_mtime)
    create_package(repo, "glibc-2.17-317.el7.i686.rpm", mtime=old_mtime)

    def _write(config_overrides=None, baseline_overrides=None):
        config = create_yaml_file(
            "config.yaml", {**main_config_data, **(config_overrides or {})}
        )
        definition = create_yaml_file(
            "el7.yaml", {**baseline_data, **(baseline_overrides or {})}
        )
        return definition, config

    return _write


def _linked(tree: Path) -> list[str]:
    return sorted(p.name for p in (tree / "RPMS").rglob("*.rpm"))


class TestBuildBaseline:
    """Tests for build_baseline()."""

    def test_keeps_newest_release(self, setup):
        """Test that only 18.el7 is linked with versions=1."""
        definition, config = setup()

        result = build_baseline(definition, config_path=config, index=False)

        assert result.status == "success"
        assert result.candidates == 2
        assert result.retained == 1
        assert result.linked == 1
        assert _linked(result.tree) == [HTTPD_NEW]
        target = result.tree / "RPMS" / "x86_64" / HTTPD_NEW
        assert target.is_symlink()
        assert Path(os.readlink(target)).name == HTTPD_NEW

    def test_tree_location_and_files(self, setup, main_config_data):
        """Test that the tree is baseline_dir/<name> with record and repo file."""
        definition, config = setup()

        result = build_baseline(definition, config_path=config, index=False)

        assert result.tree == Path(main_config_data["baseline_dir"]) / "el7-2024q1"
        assert result.repo_file == result.tree / "el7-2024q1.repo"
        assert result.record_file.exists()
        assert result.indexed is False
        assert result.signed == []
        record = yaml.safe_load(result.record_file.read_text())
        assert record["counts"]["linked"] == 1
        assert (
            "baseurl=http://repo.example.com/baselines/el7-2024q1"
            in result.repo_file.read_text()
        )

    def test_versions_override(self, setup):
        """Test that --versions keeps more releases."""
        definition, config = setup()

        result = build_baseline(definition, config_path=config, versions=2, index=False)

        assert _linked(result.tree) == [HTTPD_NEW, HTTPD_OLD]

    def test_date_override(self, setup):
        """Test that an earlier --date excludes every package."""
        definition, config = setup()

        result = build_baseline(
            definition, config_path=config, date="2023-01-01", index=False
        )

        assert result.candidates == 0
        assert _linked(result.tree) == []

    def test_include_32bit_override(self, setup):
        """Test that --include-32bit keeps i686 packages."""
        definition, config = setup()

        result = build_baseline(
            definition, config_path=config, include_32bit=True, index=False
        )

        assert "glibc-2.17-317.el7.i686.rpm" in _linked(result.tree)

    def test_indexer_called_with_workers(self, setup):
        """Test the indexer hand-off with the configured worker count."""
        definition, config = setup()

        with patch("rpmbaseline.core.index_tree") as mock_index:
            result = build_baseline(definition, config_path=config)

        mock_index.assert_called_once_with(result.tree, "createrepo_c", 2)
        assert result.indexed is True

    def test_workers_override(self, setup):
        """Test that --workers replaces the configured worker count."""
        definition, config = setup()

        with patch("rpmbaseline.core.index_tree") as mock_index:
            result = build_baseline(definition, config_path=config, workers=8)

        mock_index.assert_called_once_with(result.tree, "createrepo_c", 8)

    def test_invalid_workers_override(self, setup):
        """Test that a worker count below 1 is a ConfigError."""
        definition, config = setup()

        with pytest.raises(ConfigError, match="workers"):
            build_baseline(definition, config_path=config, workers=0)

    def test_yum_metadata_signed(self, setup):
        """Test that repomd.xml is signed when a key is configured."""
        definition, config = setup(config_overrides={"gpg_key": "ABCD1234"})

        with patch("rpmbaseline.core.index_tree"), patch(
            "rpmbaseline.core.sign_file"
        ) as mock_sign:
            result = build_baseline(definition, config_path=config)

        repomd = result.tree / "repodata" / "repomd.xml"
        mock_sign.assert_called_once_with(repomd, "ABCD1234")
        assert result.signed == [repomd]
        assert "repo_gpgcheck=1" in result.repo_file.read_text()

    def test_no_signing_without_key(self, setup):
        """Test that signing is skipped when gpg_key is unset."""
        definition, config = setup()

        with patch("rpmbaseline.core.index_tree"), patch(
            "rpmbaseline.core.sign_file"
        ) as mock_sign:
            build_baseline(definition, config_path=config)

        mock_sign.assert_not_called()

    def test_zypper_descriptors_written(self, setup):
        """Test that zypper baselines get content, media and directory.yast."""
        definition, config = setup(
            baseline_overrides={"type": "zypper", "platform": "sles12"}
        )

        with patch("rpmbaseline.core.index_tree"):
            result = build_baseline(definition, config_path=config)

        assert (result.tree / "content").exists()
        assert (result.tree / "media.1" / "media").exists()
        assert (result.tree / "directory.yast").exists()
        assert "type=rpm-md" in result.repo_file.read_text()

    def test_no_index_skips_descriptors(self, setup):
        """Test that --no-index skips the indexer and zypper descriptors."""
        definition, config = setup(baseline_overrides={"type": "zypper"})

        with patch("rpmbaseline.core.index_tree") as mock_index:
            result = build_baseline(definition, config_path=config, index=False)

        mock_index.assert_not_called()
        assert not (result.tree / "content").exists()

    def test_no_clean_rerun_skips_existing(self, setup):
        """Test that a rerun without cleaning skips already-linked packages."""
        definition, config = setup()
        build_baseline(definition, config_path=config, index=False)

        result = build_baseline(definition, config_path=config, clean=False, index=False)

        assert result.linked == 0
        assert result.skipped == 1

    def test_clean_rebuild_removes_stale_links(self, setup):
        """Test that a clean rebuild drops links no longer retained."""
        definition, config = setup()
        first = build_baseline(definition, config_path=config, versions=2, index=False)
        assert len(_linked(first.tree)) == 2

        second = build_baseline(definition, config_path=config, index=False)

        assert _linked(second.tree) == [HTTPD_NEW]

    def test_missing_source_directory(self, setup, tmp_test_dir):
        """Test that a missing source directory aborts the run."""
        definition, config = setup(
            baseline_overrides={
                "rpm_dirs": [{"dir": str(tmp_test_dir / "nope"), "date": "2024-03-31"}]
            }
        )

        with pytest.raises(FilesystemError, match="not found"):
            build_baseline(definition, config_path=config, index=False)

    def test_malformed_date_override(self, setup):
        """Test that a malformed --date aborts the run."""
        definition, config = setup()

        with pytest.raises(MalformedInputError):
            build_baseline(definition, config_path=config, date="31.03.2024")


class TestSelectBaseline:
    """Tests for select_baseline()."""

    def test_lists_without_writing(self, setup, main_config_data):
        """Test that selection returns entries and creates no tree."""
        definition, config = setup()

        result = select_baseline(definition, config_path=config)

        assert result.name == "el7-2024q1"
        assert [e.filename for e in result.retained] == [HTTPD_NEW]
        assert not Path(main_config_data["baseline_dir"]).exists()


class TestOverridesAndPolicy:
    """Tests for apply_overrides() and build_policy()."""

    def test_no_overrides_returns_same_record(self, setup):
        """Test that an untouched definition is returned as-is."""
        definition, _ = setup()
        baseline = load_baseline_definition(definition)

        assert apply_overrides(baseline) is baseline

    def test_date_override_applies_to_every_source(self, setup, tmp_test_dir):
        """Test that --date replaces the cutoff of all source directories."""
        definition, _ = setup(
            baseline_overrides={
                "rpm_dirs": [
                    {"dir": str(tmp_test_dir / "a"), "date": "2024-01-01"},
                    {"dir": str(tmp_test_dir / "b"), "date": "2024-02-01"},
                ]
            }
        )
        baseline = load_baseline_definition(definition)

        updated = apply_overrides(baseline, date="2024-06-30")

        assert [s.cutoff for s in updated.rpm_dirs] == [date(2024, 6, 30)] * 2
        assert baseline.rpm_dirs[0].cutoff == date(2024, 1, 1)

    def test_invalid_versions_override(self, setup):
        """Test that a retention count below 1 is a ConfigError."""
        definition, _ = setup()
        baseline = load_baseline_definition(definition)

        with pytest.raises(ConfigError):
            apply_overrides(baseline, versions=0)

    def test_policy_normalizes_for_redhat(self, setup):
        """Test that Red-Hat platforms enable release normalization."""
        definition, _ = setup()

        policy = build_policy(load_baseline_definition(definition))

        assert policy.normalize is True
        assert policy.max_versions == 1

    def test_policy_plain_for_suse(self, setup):
        """Test that other platforms compare releases verbatim."""
        definition, _ = setup(baseline_overrides={"platform": "sles12"})

        policy = build_policy(load_baseline_definition(definition))

        assert policy.normalize is False
