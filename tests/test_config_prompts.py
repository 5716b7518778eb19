"""Tests for geeto.config.prompts."""

from pathlib import Path

import yaml

import geeto.config.prompts as prompts_mod
from geeto.config.prompts import get_loaded_sources, get_prompts, load_prompts, render

NOWHERE = Path("/nonexistent/prompts.yaml")


class TestLoadDefaults:
    def test_loads_bundled_prompts(self, monkeypatch, reset_prompts_cache):
        monkeypatch.setattr(prompts_mod, "GLOBAL_PROMPTS", NOWHERE)
        monkeypatch.setattr(prompts_mod, "PROJECT_PROMPTS", NOWHERE)
        result = load_prompts()
        for name in ("branch_name", "branch_from_title", "commit_message", "correction"):
            assert "template" in result[name]
        assert get_loaded_sources() == ["defaults"]


class TestLoadPrompts:
    def test_project_override(self, tmp_path, monkeypatch, reset_prompts_cache):
        override_file = tmp_path / "prompts.yaml"
        override_file.write_text(yaml.dump({"commit_message": {"template": "commit {diff}"}}))
        monkeypatch.setattr(prompts_mod, "GLOBAL_PROMPTS", NOWHERE)
        monkeypatch.setattr(prompts_mod, "PROJECT_PROMPTS", override_file)
        result = load_prompts()
        assert result["commit_message"]["template"] == "commit {diff}"
        assert "branch_name" in result
        assert str(override_file) in get_loaded_sources()


class TestRender:
    def test_fills_fields(self, mocker, reset_prompts_cache):
        mocker.patch.object(
            prompts_mod,
            "load_prompts",
            return_value={
                "commit_message": {"template": "Diff:\n{diff}"},
                "correction": {"template": "\nFix: {correction}"},
            },
        )
        assert render("commit_message", diff="+x") == "Diff:\n+x"

    def test_appends_correction(self, mocker, reset_prompts_cache):
        mocker.patch.object(
            prompts_mod,
            "load_prompts",
            return_value={
                "commit_message": {"template": "Diff:\n{diff}"},
                "correction": {"template": "\nFix: {correction}"},
            },
        )
        assert render("commit_message", correction="shorter", diff="+x") == "Diff:\n+x\nFix: shorter"

    def test_bundled_templates_render(self, monkeypatch, reset_prompts_cache):
        monkeypatch.setattr(prompts_mod, "GLOBAL_PROMPTS", NOWHERE)
        monkeypatch.setattr(prompts_mod, "PROJECT_PROMPTS", NOWHERE)
        text = render("branch_name", prefix="dev/", files="app.py", diff="+login")
        assert "dev/" in text
        assert "+login" in text


class TestGetPrompts:
    def test_caches_result(self, reset_prompts_cache):
        assert get_prompts() is get_prompts()
