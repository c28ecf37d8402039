"""Tests for the hs-cli command line (hs_cli.cli)."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from conftest import read_manifest
from hs_cli.cli import build_parser, main
from hs_cli.config import CONFIG_FILENAME, Config

pytestmark = pytest.mark.unit


@pytest.fixture(autouse=True)
def isolated_cwd(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Run every command from an empty directory with no HS_CLI_* overrides."""
    for variable in ("HS_CLI_TEMPLATES_DIR", "HS_CLI_DEFAULT_TEMPLATE", "HS_CLI_OUTPUT_DIR"):
        monkeypatch.delenv(variable, raising=False)
    monkeypatch.chdir(tmp_path)
    return tmp_path


class TestParser:
    def test_create_arguments(self):
        args = build_parser().parse_args(
            ["create", "demo", "-t", "nuxt3", "-f", "unocss,sass", "-d", "out", "--force", "-y"]
        )
        assert args.command == "create"
        assert args.project_name == "demo"
        assert args.template == "nuxt3"
        assert args.features == "unocss,sass"
        assert args.directory == "out"
        assert args.force and args.yes

    def test_feature_flags_are_exclusive(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args(["create", "demo", "--all", "--none"])

    def test_version(self, capsys: pytest.CaptureFixture[str]):
        with pytest.raises(SystemExit) as excinfo:
            build_parser().parse_args(["--version"])
        assert excinfo.value.code == 0
        assert "hs-cli" in capsys.readouterr().out


class TestCreate:
    def test_creates_project(self, tmp_path: Path):
        main(["create", "demo-app", "-t", "vue3", "-f", "router,pinia", "-d", str(tmp_path), "-y"])

        target = tmp_path / "demo-app"
        manifest = read_manifest(target)
        assert manifest["name"] == "demo-app"
        assert {"pinia", "vue-router"} <= set(manifest["dependencies"])
        assert (target / "src" / "main.js").exists()
        assert not (target / "uno.config.js").exists()

    def test_defaults_with_yes_keep_every_feature(self, tmp_path: Path):
        main(["create", "full", "-d", str(tmp_path), "-y"])
        assert (tmp_path / "full" / "src" / "main.ts").exists()
        assert (tmp_path / "full" / "vite.config.ts").exists()

    def test_none_removes_every_feature(self, tmp_path: Path):
        main(["create", "bare", "-t", "nuxt3", "--none", "-d", str(tmp_path), "-y"])
        target = tmp_path / "bare"
        assert (target / "nuxt.config.js").exists()
        assert "sass" not in read_manifest(target)["devDependencies"]

    def test_unknown_features_are_ignored(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]):
        main(["create", "app", "-f", "router,teleport", "-d", str(tmp_path), "-y"])
        assert "teleport" in capsys.readouterr().out
        assert (tmp_path / "app" / "src" / "router").is_dir()

    def test_unknown_template(self, tmp_path: Path):
        with pytest.raises(SystemExit) as excinfo:
            main(["create", "app", "-t", "react", "-d", str(tmp_path), "-y"])
        assert excinfo.value.code == 1
        assert not (tmp_path / "app").exists()

    def test_missing_templates_dir(self, tmp_path: Path):
        with pytest.raises(SystemExit) as excinfo:
            main(["create", "app", "--templates-dir", str(tmp_path / "none"), "-d", str(tmp_path), "-y"])
        assert excinfo.value.code == 1
        assert not (tmp_path / "app").exists()

    def test_invalid_name(self, tmp_path: Path):
        with pytest.raises(SystemExit) as excinfo:
            main(["create", "bad name", "-d", str(tmp_path), "-y"])
        assert excinfo.value.code == 1

    def test_name_required_with_yes(self):
        with pytest.raises(SystemExit) as excinfo:
            main(["create", "-y"])
        assert excinfo.value.code == 1

    def test_non_empty_target_requires_force(self, tmp_path: Path):
        target = tmp_path / "app"
        target.mkdir()
        (target / "keep.txt").write_text("x")

        with pytest.raises(SystemExit) as excinfo:
            main(["create", "app", "-d", str(tmp_path), "-y"])
        assert excinfo.value.code == 1
        assert (target / "keep.txt").exists()

        main(["create", "app", "-d", str(tmp_path), "-y", "--force"])
        assert not (target / "keep.txt").exists()
        assert (target / "package.json").exists()

    def test_output_dir_from_config_file(self, isolated_cwd: Path):
        Config(output_dir=isolated_cwd / "projects").save(isolated_cwd / CONFIG_FILENAME)
        main(["create", "app", "-y"])
        assert (isolated_cwd / "projects" / "app" / "package.json").exists()


class TestTemplates:
    def test_lists_families(self, capsys: pytest.CaptureFixture[str]):
        main(["templates"])
        out = capsys.readouterr().out
        assert "vue3" in out
        assert "nuxt3" in out


class TestInit:
    def test_writes_config(self, isolated_cwd: Path):
        main(["init"])
        data = json.loads((isolated_cwd / CONFIG_FILENAME).read_text())
        assert data["default_template"] == "vue3"

    def test_force_overwrites(self, isolated_cwd: Path):
        (isolated_cwd / CONFIG_FILENAME).write_text("{}")
        main(["init", "--force"])
        assert Config.load(isolated_cwd / CONFIG_FILENAME) == Config()


class TestConfigErrors:
    def test_malformed_config_file(self, isolated_cwd: Path, capsys: pytest.CaptureFixture[str]):
        (isolated_cwd / CONFIG_FILENAME).write_text("{not json", encoding="utf-8")
        with pytest.raises(SystemExit) as excinfo:
            main(["templates"])
        assert excinfo.value.code == 1
        assert "invalid configuration" in capsys.readouterr().out

    def test_wrong_field_type(self, isolated_cwd: Path):
        (isolated_cwd / CONFIG_FILENAME).write_text('{"force": "sometimes"}', encoding="utf-8")
        with pytest.raises(SystemExit) as excinfo:
            main(["create", "app", "-y"])
        assert excinfo.value.code == 1
        assert not (isolated_cwd / "app").exists()
