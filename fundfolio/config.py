"""Settings - YAML configuration for fundfolio.

Example ``fundfolio.yaml``::

    storage_path: ~/.fundfolio/portfolio.json
    export_dir: exports
    valuation:
      model: gemini-3-flash-preview
      api_key_env: GEMINI_API_KEY
      timeout: 60
    refresh:
      failure_policy: keep_partial
    projection:
      annual_rate: 0.12
      years: 15
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

from fundfolio.adapters.event_log_adapter import DEFAULT_MAX_ENTRIES
from fundfolio.adapters.gemini_valuation_adapter import (
    DEFAULT_HISTORY_MONTHS,
    DEFAULT_MODEL,
    DEFAULT_TIMEOUT,
)
from fundfolio.core.services.aggregation_service import DEFAULT_TOP_N
from fundfolio.core.services.projection_service import (
    DEFAULT_ANNUAL_RATE,
    DEFAULT_PROJECTION_YEARS,
)
from fundfolio.core.services.refresh_service import FailurePolicy

# Environment variable naming the config file
CONFIG_ENV_VAR = "FUNDFOLIO_CONFIG"
DEFAULT_CONFIG_PATH = Path("fundfolio.yaml")
DEFAULT_STORAGE_PATH = Path.home() / ".fundfolio" / "portfolio.json"


class ConfigurationError(Exception):
    """Raised when configuration is invalid."""

    def __init__(self, path: str, message: str) -> None:
        self.path = path
        super().__init__(f"Configuration error in '{path}': {message}")


@dataclass(frozen=True)
class Settings:
    """Runtime settings.

    Attributes:
        storage_path: Snapshot file location
        export_dir: Default directory for exports
        model: Gemini model used for valuation lookups
        api_key_env: Environment variable holding the Gemini API key
        lookup_timeout: Valuation request timeout in seconds
        history_months: Monthly history points requested per lookup
        max_log_entries: Activity log retention
        annual_rate: Projection growth assumption
        projection_years: Projection horizon
        failure_policy: What a failed refresh batch returns
        top_n: Length of top/bottom performer lists
    """

    storage_path: Path = DEFAULT_STORAGE_PATH
    export_dir: Path = Path(".")
    model: str = DEFAULT_MODEL
    api_key_env: str = "GEMINI_API_KEY"
    lookup_timeout: float = DEFAULT_TIMEOUT
    history_months: int = DEFAULT_HISTORY_MONTHS
    max_log_entries: int = DEFAULT_MAX_ENTRIES
    annual_rate: float = DEFAULT_ANNUAL_RATE
    projection_years: int = DEFAULT_PROJECTION_YEARS
    failure_policy: FailurePolicy = FailurePolicy.KEEP_PARTIAL
    top_n: int = DEFAULT_TOP_N

    @property
    def api_key(self) -> str | None:
        """Return the API key from the configured environment variable."""
        return os.environ.get(self.api_key_env) or None

    @classmethod
    def from_dict(cls, data: dict[str, Any], source: str = "<dict>") -> "Settings":
        """Build settings from a parsed configuration mapping.

        Raises:
            ConfigurationError: If a value has the wrong type or is unknown
        """
        valuation = _section(data, "valuation", source)
        events = _section(data, "events", source)
        projection = _section(data, "projection", source)
        refresh = _section(data, "refresh", source)
        analysis = _section(data, "analysis", source)

        try:
            policy = FailurePolicy(refresh.get("failure_policy", FailurePolicy.KEEP_PARTIAL.value))
        except ValueError as e:
            raise ConfigurationError(
                source,
                f"refresh.failure_policy must be one of {[p.value for p in FailurePolicy]}",
            ) from e

        try:
            return cls(
                storage_path=Path(data.get("storage_path", DEFAULT_STORAGE_PATH)).expanduser(),
                export_dir=Path(data.get("export_dir", ".")).expanduser(),
                model=str(valuation.get("model", DEFAULT_MODEL)),
                api_key_env=str(valuation.get("api_key_env", "GEMINI_API_KEY")),
                lookup_timeout=float(valuation.get("timeout", DEFAULT_TIMEOUT)),
                history_months=int(valuation.get("history_months", DEFAULT_HISTORY_MONTHS)),
                max_log_entries=int(events.get("max_entries", DEFAULT_MAX_ENTRIES)),
                annual_rate=float(projection.get("annual_rate", DEFAULT_ANNUAL_RATE)),
                projection_years=int(projection.get("years", DEFAULT_PROJECTION_YEARS)),
                failure_policy=policy,
                top_n=int(analysis.get("top_n", DEFAULT_TOP_N)),
            )
        except (TypeError, ValueError) as e:
            raise ConfigurationError(source, f"Invalid value: {e}") from e


def load_settings(path: str | Path | None = None) -> Settings:
    """Load settings from YAML.

    Args:
        path: Config file; defaults to $FUNDFOLIO_CONFIG, then ./fundfolio.yaml

    Returns:
        Settings (defaults when the file does not exist)

    Raises:
        FileNotFoundError: If an explicitly given file doesn't exist
        ConfigurationError: If YAML is invalid or the root is not a mapping
    """
    explicit = path is not None or CONFIG_ENV_VAR in os.environ
    config_path = Path(path or os.environ.get(CONFIG_ENV_VAR) or DEFAULT_CONFIG_PATH)

    if not config_path.exists():
        if explicit:
            raise FileNotFoundError(f"Configuration file not found: {config_path}")
        return Settings()

    try:
        with open(config_path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigurationError(str(config_path), f"Invalid YAML: {e}") from e

    if data is None:
        return Settings()
    if not isinstance(data, dict):
        raise ConfigurationError(str(config_path), "Root element must be a dictionary")

    return Settings.from_dict(data, str(config_path))


def _section(data: dict[str, Any], key: str, source: str) -> dict[str, Any]:
    value = data.get(key) or {}
    if not isinstance(value, dict):
        raise ConfigurationError(source, f"'{key}' must be a mapping")
    return value
