"""Tests for geeto.config.credentials."""

import stat

from geeto.config.credentials import (
    GEMINI_FILE,
    GITHUB_FILE,
    TRELLO_FILE,
    GeminiConfig,
    GithubConfig,
    TrelloConfig,
    read_credentials,
    write_credentials,
)


class TestReadWrite:
    def test_write_then_read(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        base = tmp_path / ".geeto"
        path = write_credentials(GEMINI_FILE, {"api_key": 'k"ey', "model": None}, base)
        assert path.read_text() == 'api_key = "k\\"ey"\n'
        assert read_credentials(GEMINI_FILE, base) == {"api_key": 'k"ey'}

    def test_file_is_private_and_ignored(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        path = write_credentials(GITHUB_FILE, {"token": "t"}, tmp_path / ".geeto")
        assert stat.S_IMODE(path.stat().st_mode) == 0o600
        assert ".geeto" in (tmp_path / ".gitignore").read_text()

    def test_missing(self, tmp_path):
        assert read_credentials(GEMINI_FILE, tmp_path) == {}

    def test_malformed(self, tmp_path, capsys):
        (tmp_path / GEMINI_FILE).write_text("api_key = \n")
        assert read_credentials(GEMINI_FILE, tmp_path) == {}
        assert "Ignoring malformed" in capsys.readouterr().out


class TestProviderConfigs:
    def test_env_overrides_file(self, tmp_path, monkeypatch):
        (tmp_path / GEMINI_FILE).write_text('api_key = "from-file"\nmodel = "gemini-x"\n')
        monkeypatch.setenv("GEMINI_API_KEY", "from-env")
        config = GeminiConfig.load(tmp_path)
        assert config.api_key == "from-env"
        assert config.model == "gemini-x"

    def test_missing_key(self, tmp_path, monkeypatch):
        monkeypatch.delenv("GEMINI_API_KEY", raising=False)
        assert GeminiConfig.load(tmp_path) is None

    def test_trello_needs_all_fields(self, tmp_path):
        (tmp_path / TRELLO_FILE).write_text('api_key = "k"\ntoken = "t"\n')
        assert TrelloConfig.load(tmp_path) is None
        (tmp_path / TRELLO_FILE).write_text('api_key = "k"\ntoken = "t"\nboard_id = "b"\n')
        assert TrelloConfig.load(tmp_path) == TrelloConfig("k", "t", "b")

    def test_github_token(self, tmp_path, monkeypatch):
        monkeypatch.delenv("GITHUB_TOKEN", raising=False)
        (tmp_path / GITHUB_FILE).write_text('token = "ghp_x"\n')
        assert GithubConfig.load(tmp_path).token == "ghp_x"
