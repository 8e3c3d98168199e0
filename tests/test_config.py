"""Tests for configuration loading."""

from pathlib import Path
from textwrap import dedent

import pytest

from skillhub.config import DEFAULT_REGISTRY, HubConfig, find_config_path
from skillhub.errors import ParseError


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ("SKILLHUB_CONFIG", "SKILLHUB_REGISTRY", "SKILLHUB_TOKEN"):
        monkeypatch.delenv(name, raising=False)


class TestHubConfig:
    """Tests for HubConfig."""

    def test_default_values(self) -> None:
        """Should have sensible defaults."""
        config = HubConfig()

        assert config.data_dir == Path("./skillhub.data")
        assert config.registry == DEFAULT_REGISTRY
        assert config.token is None
        assert config.skip_security_warnings is False
        assert config.timeout == 30.0
        assert config.download_timeout == 120.0
        assert config.disabled_skills == []

    def test_derived_paths(self, tmp_path: Path) -> None:
        """Skills dir and lock file live under the data dir."""
        config = HubConfig(data_dir=tmp_path)

        assert config.skills_dir == tmp_path / "skills"
        assert config.lockfile_path == tmp_path / "skills-lock.json"

    def test_from_dict(self) -> None:
        """Should read every field and normalise the registry URL."""
        config = HubConfig.from_dict(
            {
                "data_dir": "/srv/agent",
                "registry": "https://registry.example.com/",
                "token": "ch_abc",
                "skip_security_warnings": True,
                "timeout": 5,
                "disabled_skills": ["noisy"],
            }
        )

        assert config.data_dir == Path("/srv/agent")
        # Trailing slash trimmed
        assert config.registry == "https://registry.example.com"
        assert config.token == "ch_abc"
        assert config.skip_security_warnings is True
        assert config.timeout == 5.0
        assert config.disabled_skills == ["noisy"]

    def test_from_dict_rejects_non_mapping(self) -> None:
        """Should reject a document that is not a mapping."""
        with pytest.raises(ParseError):
            HubConfig.from_dict(["not", "a", "mapping"])  # type: ignore[arg-type]

    def test_from_yaml_string(self) -> None:
        """Should load config from YAML text."""
        yaml_content = dedent("""
            registry: https://mirror.example.com
            skip_security_warnings: true
        """)

        config = HubConfig.from_yaml_string(yaml_content)

        assert config.registry == "https://mirror.example.com"
        assert config.skip_security_warnings is True

    def test_empty_yaml_gives_defaults(self) -> None:
        """Should fall back to defaults for an empty document."""
        assert HubConfig.from_yaml_string("") == HubConfig()

    def test_invalid_yaml_raises_parse_error(self) -> None:
        """Should report broken YAML as a parse error."""
        with pytest.raises(ParseError):
            HubConfig.from_yaml_string("registry: [unclosed")

    def test_from_yaml_file(self, tmp_path: Path) -> None:
        """Should load config from a YAML file."""
        path = tmp_path / "skillhub.config.yaml"
        path.write_text("data_dir: ./agent-data\ntoken: ch_file\n")

        config = HubConfig.from_yaml(path)

        assert config.data_dir == Path("./agent-data")
        assert config.token == "ch_file"

    def test_to_dict(self) -> None:
        """Should round-trip through to_dict."""
        config = HubConfig(token="t", disabled_skills=["x"])

        data = config.to_dict()

        assert data["token"] == "t"
        assert data["disabled_skills"] == ["x"]
        assert HubConfig.from_dict(data) == config


class TestInvalidValues:
    """Tests for rejecting malformed config values."""

    @pytest.mark.parametrize(
        "yaml_content",
        [
            "timeout: soon\n",
            "download_timeout: [1, 2]\n",
            "timeout: 0\n",
            "timeout: -5\n",
            "timeout: true\n",
            "registry: 123\n",
            "registry: {url: x}\n",
            "data_dir: [a, b]\n",
            "data_dir: 42\n",
            "disabled_skills: 5\n",
        ],
    )
    def test_bad_value_raises_parse_error(self, yaml_content: str) -> None:
        """Should report a wrongly typed value as a parse error."""
        with pytest.raises(ParseError):
            HubConfig.from_yaml_string(yaml_content)

    def test_timeout_message_names_the_key(self) -> None:
        """Should say which setting was wrong."""
        with pytest.raises(ParseError, match="timeout"):
            HubConfig.from_yaml_string("timeout: soon\n")

    def test_numeric_string_timeout_accepted(self) -> None:
        """Should accept a quoted number of seconds."""
        assert HubConfig.from_yaml_string("timeout: '12.5'\n").timeout == 12.5

    def test_single_disabled_skill_string(self) -> None:
        """Should treat a bare string as a one-item list."""
        assert HubConfig.from_yaml_string("disabled_skills: noisy\n").disabled_skills == ["noisy"]

    def test_non_utf8_file_raises_parse_error(self, tmp_path: Path) -> None:
        """Should report an undecodable config file as a parse error."""
        path = tmp_path / "skillhub.config.yaml"
        path.write_bytes(b"registry: \xff\xfe\n")

        with pytest.raises(ParseError, match="UTF-8"):
            HubConfig.from_yaml(path)


class TestLoad:
    """Tests for config discovery and env overrides."""

    def test_no_file_uses_defaults(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        """Should use defaults when no config file exists."""
        monkeypatch.chdir(tmp_path)

        assert find_config_path() is None
        assert HubConfig.load() == HubConfig()

    def test_finds_file_in_cwd(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        """Should find a .yml file in the working directory."""
        monkeypatch.chdir(tmp_path)
        (tmp_path / "skillhub.config.yml").write_text("timeout: 12\n")

        config = HubConfig.load()

        assert config.timeout == 12.0

    def test_env_var_points_to_file(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        """Should load the file named by SKILLHUB_CONFIG."""
        path = tmp_path / "custom.yaml"
        path.write_text("registry: https://custom.example.com\n")
        monkeypatch.setenv("SKILLHUB_CONFIG", str(path))

        assert HubConfig.load().registry == "https://custom.example.com"

    def test_env_var_missing_file(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        """Should fail when SKILLHUB_CONFIG names a missing file."""
        monkeypatch.setenv("SKILLHUB_CONFIG", str(tmp_path / "gone.yaml"))

        with pytest.raises(ParseError, match="non-existent"):
            HubConfig.load()

    def test_env_overrides(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        """Should let env vars override the registry and token."""
        monkeypatch.chdir(tmp_path)
        (tmp_path / "skillhub.config.yaml").write_text("registry: https://file.example.com\ntoken: from-file\n")
        monkeypatch.setenv("SKILLHUB_REGISTRY", "https://env.example.com/")
        monkeypatch.setenv("SKILLHUB_TOKEN", "from-env")

        config = HubConfig.load()

        assert config.registry == "https://env.example.com"
        assert config.token == "from-env"

    def test_explicit_path_wins(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        """Should prefer an explicit path over discovery."""
        monkeypatch.chdir(tmp_path)
        (tmp_path / "skillhub.config.yaml").write_text("timeout: 1\n")
        explicit = tmp_path / "other.yaml"
        explicit.write_text("timeout: 99\n")

        assert HubConfig.load(explicit).timeout == 99.0
