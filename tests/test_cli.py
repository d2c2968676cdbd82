"""CLI smoke tests using typer's CliRunner."""

import json

import pytest
from typer.testing import CliRunner

from traitmix.cli.app import app
from traitmix.cli.utils import ExitCode, exit_code_for
from traitmix.core.errors import (
    ConfigParseError,
    LockAcquisitionFailure,
    ToleranceExceeded,
    ZeroWeightLayer,
)

runner = CliRunner()


@pytest.fixture
def workspace(tmp_path, trait_tree, project_doc):
    """A traits folder plus one project document asking for 3 of 4 combinations."""
    root = trait_tree(
        {"Body": ["Short.png", "Tall.png"], "Hat": ["Cap.png", "Crown.png"]}
    )

    def _write(**overrides):
        data = {
            "name": "demo",
            "amount": 3,
            "tolerance": 1000,
            "path": str(root),
            "layers": [{"name": "Body"}, {"name": "Hat"}],
        }
        data.update(overrides)
        project_doc("demo", data)
        return tmp_path

    return _write


def _gen_args(tmp_path, *extra):
    return [
        "gen",
        "-c",
        str(tmp_path / "configs"),
        "-b",
        str(tmp_path / "blacklist.json"),
        "-o",
        str(tmp_path / "output"),
        "--seed",
        "1",
        *extra,
    ]


class TestGenCommand:
    """Tests for the gen command."""

    def test_gen_writes_outputs(self, workspace):
        tmp_path = workspace()
        result = runner.invoke(app, _gen_args(tmp_path))

        assert result.exit_code == 0, result.output
        project_dir = tmp_path / "output" / "demo"
        assert len(list(project_dir.glob("*.png"))) == 3
        assert (project_dir / "rarity.json").exists()
        assert (project_dir / "manifest.json").exists()

    def test_gen_cleans_previous_output(self, workspace):
        tmp_path = workspace()
        stale = tmp_path / "output" / "old" / "stale.png"
        stale.parent.mkdir(parents=True)
        stale.write_bytes(b"")

        result = runner.invoke(app, _gen_args(tmp_path))

        assert result.exit_code == 0, result.output
        assert not stale.exists()

    def test_gen_json_output(self, workspace):
        tmp_path = workspace()
        result = runner.invoke(app, ["--json", *_gen_args(tmp_path)])

        assert result.exit_code == 0, result.output
        data = json.loads(result.stdout)
        assert data["status"] == "success"
        assert data["seed"] == 1
        assert data["project_names"] == ["demo"]
        assert data["projects"][0]["Generated"] == "3"

    def test_gen_with_blacklist(self, workspace):
        tmp_path = workspace(amount=2, tolerance=10_000)
        (tmp_path / "blacklist.json").write_text(
            json.dumps({"list": [{"trait_name": "Tall", "excludes": ["Crown"]}]})
        )
        result = runner.invoke(app, _gen_args(tmp_path))

        assert result.exit_code == 0, result.output
        for doc in (tmp_path / "output" / "demo").glob("*.json"):
            if doc.name in ("rarity.json", "manifest.json"):
                continue
            attrs = json.loads(doc.read_text())
            assert attrs != {"Body": "Tall", "Hat": "Crown"}

    def test_gen_tolerance_exceeded(self, workspace):
        tmp_path = workspace(amount=10, tolerance=2)
        result = runner.invoke(app, _gen_args(tmp_path))

        assert result.exit_code == 4
        assert not (tmp_path / "output" / "demo").exists()

    def test_gen_missing_configs(self, tmp_path):
        result = runner.invoke(app, _gen_args(tmp_path))
        assert result.exit_code == 3

    def test_gen_empty_configs(self, tmp_path):
        (tmp_path / "configs").mkdir()
        result = runner.invoke(app, _gen_args(tmp_path))
        assert result.exit_code == 3

    def test_gen_invalid_project(self, tmp_path):
        (tmp_path / "configs").mkdir()
        (tmp_path / "configs" / "demo.json").write_text("{broken")
        result = runner.invoke(app, _gen_args(tmp_path))
        assert result.exit_code == 1

    def test_gen_ambiguous_blacklist(self, workspace):
        tmp_path = workspace()
        (tmp_path / "blacklist.json").write_text(
            json.dumps(
                {
                    "list": [
                        {"trait_name": "Tall", "excludes": ["Crown"]},
                        {"trait_name": "Short", "excludes": ["Crown"]},
                    ]
                }
            )
        )
        result = runner.invoke(app, _gen_args(tmp_path))
        assert result.exit_code == 1

    def test_gen_unreadable_trait_image(self, workspace):
        tmp_path = workspace()
        (tmp_path / "traits" / "Body" / "Broken.png").write_bytes(b"garbage")
        result = runner.invoke(app, _gen_args(tmp_path))

        assert result.exit_code == 1
        assert not (tmp_path / "output" / "demo").exists()


class TestValidateCommand:
    """Tests for the validate command."""

    def test_validate_ok(self, workspace):
        tmp_path = workspace()
        result = runner.invoke(
            app,
            [
                "validate",
                "-c",
                str(tmp_path / "configs"),
                "-b",
                str(tmp_path / "blacklist.json"),
            ],
        )
        assert result.exit_code == 0, result.output
        assert "1 project(s) valid" in result.output

    def test_validate_duplicate_trait(self, workspace, trait_tree, tmp_path):
        root = trait_tree(
            {"Hat": ["Gold.png"], "Chain": ["Gold.png"]}, tmp_path / "dup"
        )
        workspace(path=str(root), layers=[{"name": "Hat"}, {"name": "Chain"}])

        result = runner.invoke(
            app,
            [
                "validate",
                "-c",
                str(tmp_path / "configs"),
                "-b",
                str(tmp_path / "blacklist.json"),
            ],
        )
        assert result.exit_code == 1
        assert "Duplicated trait name" in result.output

    def test_validate_missing_configs(self, tmp_path):
        result = runner.invoke(app, ["validate", "-c", str(tmp_path / "nope")])
        assert result.exit_code == 3


class TestCleanCommand:
    """Tests for the clean command."""

    def test_clean_removes_output(self, tmp_path):
        output = tmp_path / "output"
        (output / "demo").mkdir(parents=True)
        result = runner.invoke(app, ["clean", "-o", str(output)])
        assert result.exit_code == 0
        assert not output.exists()

    def test_clean_nothing(self, tmp_path):
        result = runner.invoke(app, ["clean", "-o", str(tmp_path / "output")])
        assert result.exit_code == 0
        assert "Nothing to clean" in result.output


class TestConfigCommand:
    """Tests for the config command."""

    def test_config_show(self):
        result = runner.invoke(app, ["config", "show"])
        assert result.exit_code == 0
        assert "Paths" in result.output
        assert "Generation" in result.output

    def test_config_set_and_reset(self, isolated_config):
        result = runner.invoke(app, ["config", "set", "generation.max_workers", "3"])
        assert result.exit_code == 0
        saved = json.loads((isolated_config / "config.json").read_text())
        assert saved["generation"]["max_workers"] == 3

        result = runner.invoke(app, ["config", "reset"])
        assert result.exit_code == 0
        assert not (isolated_config / "config.json").exists()

    def test_config_set_bool(self, isolated_config):
        result = runner.invoke(
            app, ["config", "set", "generation.blacklist_case_sensitive", "yes"]
        )
        assert result.exit_code == 0
        saved = json.loads((isolated_config / "config.json").read_text())
        assert saved["generation"]["blacklist_case_sensitive"] is True

    def test_config_set_invalid_key(self):
        result = runner.invoke(app, ["config", "set", "invalid.key", "value"])
        assert result.exit_code == 1
        assert "Unknown key" in result.output

    def test_config_set_invalid_int_value(self):
        result = runner.invoke(app, ["config", "set", "generation.max_workers", "abc"])
        assert result.exit_code == 1
        assert "Invalid integer" in result.output

    def test_config_set_missing_args(self):
        result = runner.invoke(app, ["config", "set"])
        assert result.exit_code == 1

    def test_config_unknown_action(self):
        result = runner.invoke(app, ["config", "unknown_action"])
        assert result.exit_code == 1
        assert "Unknown action" in result.output


class TestVersionFlag:
    """Test the --version flag."""

    def test_version_output(self):
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert "traitmix" in result.output


class TestExitCodes:
    """Tests for error-to-exit-code mapping."""

    def test_exit_code_for(self, tmp_path):
        assert exit_code_for(FileNotFoundError("x")) == ExitCode.FILE_NOT_FOUND
        assert exit_code_for(ConfigParseError(tmp_path, "bad")) == 1
        assert exit_code_for(ZeroWeightLayer("Hat")) == 1
        assert exit_code_for(LockAcquisitionFailure(1.0)) == 4
        assert exit_code_for(ToleranceExceeded("demo", 10, 2, 3, 1)) == 4
