"""Tests for the cloudpages command line."""

import json

import pytest
import yaml

from cloudpages.main import build_parser, main


def _write(path, data):
    path.write_text(json.dumps(data), encoding="utf-8")
    return path


@pytest.fixture(autouse=True)
def _keep_test_logging(monkeypatch):
    # main() would otherwise replace the root handlers pytest relies on
    monkeypatch.setattr("cloudpages.main.configure_logging", lambda level: None)


_CONFIG = {
    "pageSettings": {"pageName": "Cli Page", "pageType": "landing", "title": "From the CLI"},
    "codeResources": {"css": {"framework": "bootstrap"}},
}


class TestGenerateCommand:
    def test_writes_artifacts(self, tmp_path, capsys):
        config = _write(tmp_path / "page.json", _CONFIG)
        out = tmp_path / "build"
        assert main(["generate", str(config), "--output", str(out)]) == 0
        assert "<title>From the CLI</title>" in (out / "index.html").read_text(encoding="utf-8")
        assert (out / "styles.css").exists()
        assert (out / "scripts.js").exists()
        assert not (out / "ampscript.txt").exists()
        assert (out / "deployment-instructions.md").read_text(encoding="utf-8").startswith(
            "# Deployment Instructions for Cli Page"
        )
        assert "Wrote" in capsys.readouterr().out

    def test_yaml_detected_by_extension(self, tmp_path):
        config = tmp_path / "page.yaml"
        config.write_text(yaml.safe_dump(_CONFIG), encoding="utf-8")
        assert main(["generate", str(config), "-o", str(tmp_path)]) == 0

    def test_framework_override(self, tmp_path):
        config = _write(tmp_path / "page.json", _CONFIG)
        assert main(["generate", str(config), "--framework", "tailwind", "-o", str(tmp_path)]) == 0
        assert "cdn.tailwindcss.com" in (tmp_path / "index.html").read_text(encoding="utf-8")

    def test_template_with_overrides(self, tmp_path):
        overrides = _write(tmp_path / "overrides.json", {"pageSettings": {"pageName": "Override"}})
        assert main(["generate", str(overrides), "--template", "bootstrap-form", "-o", str(tmp_path)]) == 0
        assert (tmp_path / "ampscript.txt").exists()
        notes = (tmp_path / "integration-notes.md").read_text(encoding="utf-8")
        assert notes.startswith("# Integration Notes for Override")

    def test_template_with_framework(self, tmp_path):
        assert main(["generate", "--template", "bootstrap-landing", "--framework", "vanilla", "-o", str(tmp_path)]) == 0
        assert "Vanilla CSS - No framework" in (tmp_path / "index.html").read_text(encoding="utf-8")

    def test_unknown_template(self, tmp_path, capsys):
        assert main(["generate", "--template", "does-not-exist", "-o", str(tmp_path)]) == 1
        assert "does-not-exist" in capsys.readouterr().err

    def test_invalid_configuration(self, tmp_path, capsys):
        config = _write(tmp_path / "page.json", {"pageSettings": {}})
        assert main(["generate", str(config), "-o", str(tmp_path)]) == 1
        assert "Configuration validation failed" in capsys.readouterr().err

    def test_malformed_file(self, tmp_path, capsys):
        config = tmp_path / "page.json"
        config.write_text("{nope", encoding="utf-8")
        assert main(["generate", str(config), "-o", str(tmp_path)]) == 1
        assert "Invalid JSON format" in capsys.readouterr().err

    def test_missing_file(self, tmp_path):
        assert main(["generate", str(tmp_path / "missing.json")]) == 1

    def test_requires_config_or_template(self, capsys):
        assert main(["generate"]) == 1


class TestValidateCommand:
    def test_valid(self, tmp_path, capsys):
        config = _write(tmp_path / "page.json", _CONFIG)
        assert main(["validate", str(config)]) == 0
        result = json.loads(capsys.readouterr().out)
        assert result["is_valid"] is True

    def test_invalid(self, tmp_path, capsys):
        config = _write(tmp_path / "page.json", {"pageSettings": {}})
        assert main(["validate", str(config)]) == 1
        result = json.loads(capsys.readouterr().out)
        assert result["errors"]


class TestTemplatesCommand:
    def test_lists_all(self, capsys):
        assert main(["templates"]) == 0
        out = capsys.readouterr().out
        assert "bootstrap-landing" in out
        assert len(out.strip().splitlines()) == 15

    def test_filter_by_page_type(self, capsys):
        assert main(["templates", "--page-type", "unsubscribe"]) == 0
        assert len(capsys.readouterr().out.strip().splitlines()) == 3


class TestParser:
    def test_command_required(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args([])

    def test_rejects_unknown_framework(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args(["generate", "x.json", "--framework", "foundation"])
