"""
Tests for configuration loading.
"""

import pytest

from fitchcheck.config import (
    CONFIG_FILENAME,
    CheckerSettings,
    apply_env_overrides,
    create_default_config,
    find_config_file,
    load_config,
)
from fitchcheck.rulebook import DEFAULT_RULESET


class TestCheckerSettings:
    """Tests for the settings dataclass and its YAML form."""

    def test_defaults(self):
        """Default settings allow every rule."""
        settings = CheckerSettings()
        assert settings.variables == "x,y,z,u,v,w"
        assert settings.max_formula_depth == 100
        assert settings.max_box_depth == 32
        assert not settings.verbose
        assert settings.ruleset is DEFAULT_RULESET

    def test_yaml_round_trip(self, tmp_path):
        """Settings survive a save and load."""
        path = tmp_path / "fitch.yaml"
        original = CheckerSettings(variables="x,y", max_box_depth=8, rules=("Reit", "∧Intro"))

        original.to_yaml(path)

        assert CheckerSettings.from_yaml(path) == original

    def test_variables_as_list(self):
        """A YAML list of variables is accepted."""
        settings = CheckerSettings.from_dict({"checker": {"variables": ["x", "y", "z"]}})
        assert settings.variables == "x,y,z"

    def test_missing_sections_use_defaults(self):
        """Empty sections fall back to defaults."""
        assert CheckerSettings.from_dict({"checker": None, "logging": None}) == CheckerSettings()

    def test_verbose_from_logging_section(self):
        """The verbose flag lives under logging."""
        assert CheckerSettings.from_dict({"logging": {"verbose": "yes"}}).verbose

    def test_invalid_depth(self):
        """Depth limits must be positive integers."""
        with pytest.raises(ValueError, match="max_formula_depth must be an integer"):
            CheckerSettings.from_dict({"checker": {"max_formula_depth": "deep"}})
        with pytest.raises(ValueError, match="max_box_depth must be at least 1"):
            CheckerSettings.from_dict({"checker": {"max_box_depth": 0}})

    def test_missing_file(self, tmp_path):
        """Loading a missing file raises."""
        with pytest.raises(FileNotFoundError):
            CheckerSettings.from_yaml(tmp_path / "absent.yaml")

    def test_non_mapping_file(self, tmp_path):
        """A YAML list is not a config."""
        path = tmp_path / "fitch.yaml"
        path.write_text("- x\n- y\n", encoding="utf-8")
        with pytest.raises(ValueError, match="must contain a mapping"):
            CheckerSettings.from_yaml(path)

    def test_restricted_ruleset(self):
        """Listed rules build a custom rule set."""
        ruleset = CheckerSettings(rules=("Reit",)).ruleset
        assert ruleset.is_available("Reit")
        assert not ruleset.is_available("∧Intro")


class TestEnvironmentOverrides:
    """Tests for FITCH_* variables."""

    def test_overrides_applied(self):
        """Each variable replaces its setting."""
        settings = apply_env_overrides(
            CheckerSettings(),
            {
                "FITCH_VARIABLES": "p,q",
                "FITCH_MAX_FORMULA_DEPTH": "50",
                "FITCH_MAX_BOX_DEPTH": "4",
                "FITCH_VERBOSE": "true",
            },
        )
        assert settings == CheckerSettings(
            variables="p,q", max_formula_depth=50, max_box_depth=4, verbose=True
        )

    def test_no_overrides(self):
        """Without variables the settings are unchanged."""
        settings = CheckerSettings(variables="x")
        assert apply_env_overrides(settings, {}) is settings

    def test_invalid_override(self):
        """Bad numbers are reported with the variable name."""
        with pytest.raises(ValueError, match="FITCH_MAX_BOX_DEPTH"):
            apply_env_overrides(CheckerSettings(), {"FITCH_MAX_BOX_DEPTH": "-1"})


class TestConfigDiscovery:
    """Tests for finding and loading config files."""

    @pytest.fixture
    def workdir(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("HOME", str(tmp_path / "home"))
        return tmp_path

    def test_no_config_found(self, workdir):
        """Nothing is found in an empty directory."""
        assert find_config_file() is None

    def test_local_config_found(self, workdir):
        """./fitch.yaml is discovered."""
        create_default_config(workdir / CONFIG_FILENAME)
        assert find_config_file().name == CONFIG_FILENAME

    def test_user_config_found(self, workdir):
        """The user config is used when there is no local file."""
        user_config = workdir / "home" / ".config" / "fitchcheck" / "config.yaml"
        user_config.parent.mkdir(parents=True)
        create_default_config(user_config)
        assert find_config_file() == user_config

    def test_load_config_defaults(self, workdir):
        """Without a file, defaults are returned with no path."""
        settings, path = load_config(environ={})
        assert settings == CheckerSettings()
        assert path is None

    def test_load_config_explicit_path(self, workdir):
        """An explicit path wins and env overrides apply on top."""
        path = workdir / "custom.yaml"
        CheckerSettings(max_box_depth=5).to_yaml(path)

        settings, found = load_config(path, environ={"FITCH_VARIABLES": "x"})

        assert found == path
        assert settings.max_box_depth == 5
        assert settings.variables == "x"

    def test_default_config_is_loadable(self, workdir):
        """The generated default file loads back to the defaults."""
        path = workdir / CONFIG_FILENAME
        create_default_config(path)
        assert CheckerSettings.from_yaml(path) == CheckerSettings()
