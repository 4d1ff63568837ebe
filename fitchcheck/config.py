"""
Configuration for fitchcheck.

Config files are searched in order:
1. Explicit path passed via --config
2. ./fitch.yaml (current directory)
3. ~/.config/fitchcheck/config.yaml (user config)

Environment variables (a .env file is loaded on import) override the file:
- FITCH_VARIABLES: Comma-separated bindable variables (default: x,y,z,u,v,w)
- FITCH_MAX_FORMULA_DEPTH: Formula nesting limit (default: 100)
- FITCH_MAX_BOX_DEPTH: Subproof nesting limit (default: 32)
- FITCH_VERBOSE: Enable debug logging (1/true/yes/on)
"""

from __future__ import annotations

import os
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, Mapping, Optional

import yaml
from dotenv import load_dotenv

from .logic.parser import DEFAULT_MAX_DEPTH, DEFAULT_VARIABLE_LIST
from .proof.structure import DEFAULT_MAX_BOX_DEPTH
from .rulebook import DEFAULT_RULESET, RuleSet, create_custom_ruleset

load_dotenv()

CONFIG_FILENAME = "fitch.yaml"
USER_CONFIG_PATH = Path(".config") / "fitchcheck" / "config.yaml"

_TRUE_VALUES = {"1", "true", "yes", "on"}


def _positive_int(value: Any, name: str) -> int:
    try:
        number = int(value)
    except (TypeError, ValueError):
        raise ValueError(f"{name} must be an integer, got {value!r}") from None
    if number < 1:
        raise ValueError(f"{name} must be at least 1, got {number}")
    return number


def _flag(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in _TRUE_VALUES


@dataclass(frozen=True)
class CheckerSettings:
    """
    Settings passed to the checker and formatter.

    ``rules`` restricts the usable rules when set; None allows all of them.
    """

    variables: str = DEFAULT_VARIABLE_LIST
    max_formula_depth: int = DEFAULT_MAX_DEPTH
    max_box_depth: int = DEFAULT_MAX_BOX_DEPTH
    verbose: bool = False
    rules: Optional[tuple[str, ...]] = None

    @property
    def ruleset(self) -> RuleSet:
        if self.rules is None:
            return DEFAULT_RULESET
        return create_custom_ruleset(list(self.rules))

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> CheckerSettings:
        checker = data.get("checker", {}) or {}
        logging_data = data.get("logging", {}) or {}

        variables = checker.get("variables", DEFAULT_VARIABLE_LIST)
        if isinstance(variables, list):
            variables = ",".join(str(v) for v in variables)

        rules = checker.get("rules")
        return cls(
            variables=str(variables),
            max_formula_depth=_positive_int(
                checker.get("max_formula_depth", DEFAULT_MAX_DEPTH), "max_formula_depth"
            ),
            max_box_depth=_positive_int(
                checker.get("max_box_depth", DEFAULT_MAX_BOX_DEPTH), "max_box_depth"
            ),
            verbose=_flag(logging_data.get("verbose", False)),
            rules=tuple(str(r) for r in rules) if rules is not None else None,
        )

    @classmethod
    def from_yaml(cls, path: Path) -> CheckerSettings:
        """Load settings from a YAML file."""
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")

        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
        if not isinstance(data, dict):
            raise ValueError(f"Config file {path} must contain a mapping")
        return cls.from_dict(data)

    def to_dict(self) -> dict[str, Any]:
        checker: dict[str, Any] = {
            "variables": self.variables,
            "max_formula_depth": self.max_formula_depth,
            "max_box_depth": self.max_box_depth,
        }
        if self.rules is not None:
            checker["rules"] = list(self.rules)
        return {"checker": checker, "logging": {"verbose": self.verbose}}

    def to_yaml(self, path: Path) -> None:
        """Save settings to a YAML file."""
        with open(path, "w", encoding="utf-8") as f:
            yaml.dump(self.to_dict(), f, default_flow_style=False, sort_keys=False, allow_unicode=True)


def apply_env_overrides(
    settings: CheckerSettings, environ: Mapping[str, str] | None = None
) -> CheckerSettings:
    """Return ``settings`` with any FITCH_* environment variables applied."""
    env = os.environ if environ is None else environ
    changes: dict[str, Any] = {}

    if (variables := env.get("FITCH_VARIABLES")) is not None:
        changes["variables"] = variables
    if (depth := env.get("FITCH_MAX_FORMULA_DEPTH")) is not None:
        changes["max_formula_depth"] = _positive_int(depth, "FITCH_MAX_FORMULA_DEPTH")
    if (depth := env.get("FITCH_MAX_BOX_DEPTH")) is not None:
        changes["max_box_depth"] = _positive_int(depth, "FITCH_MAX_BOX_DEPTH")
    if (verbose := env.get("FITCH_VERBOSE")) is not None:
        changes["verbose"] = _flag(verbose)

    return replace(settings, **changes) if changes else settings


def find_config_file() -> Path | None:
    """Find config file in ./fitch.yaml or ~/.config/fitchcheck/config.yaml."""
    local_config = Path(CONFIG_FILENAME)
    if local_config.exists():
        return local_config

    user_config = Path.home() / USER_CONFIG_PATH
    if user_config.exists():
        return user_config

    return None


def load_config(
    path: Path | None = None, environ: Mapping[str, str] | None = None
) -> tuple[CheckerSettings, Path | None]:
    """Load settings from file (or defaults), then apply environment overrides."""
    if path is None:
        path = find_config_file()
    settings = CheckerSettings.from_yaml(path) if path is not None else CheckerSettings()
    return apply_env_overrides(settings, environ), path


def create_default_config(path: Path) -> None:
    """Create a default config file at the given path."""
    CheckerSettings().to_yaml(path)
