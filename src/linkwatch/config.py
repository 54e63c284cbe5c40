"""Application configuration via environment variables and .env file."""

import re
from pathlib import Path
from typing import Annotated

from pydantic import field_validator
from pydantic_settings import BaseSettings, NoDecode
from pydantic_settings.sources import DotEnvSettingsSource, PydanticBaseSettingsSource

# Path to .env file (patch in tests to use tmp_path / ".env")
_ENV_FILE: Path = Path(".env")

_ENV_PREFIX = "LINKWATCH_"


def _field_to_env_key(name: str) -> str:
    """Convert Settings field name to LINKWATCH_ env var name."""
    return _ENV_PREFIX + name.upper()


def _parse_env_line(line: str) -> tuple[str, str] | None:
    """Parse a single KEY=VALUE or KEY="VALUE" line. Returns (key, value) or None."""
    line = line.strip()
    if not line or line.startswith("#"):
        return None
    m = re.match(r"([A-Za-z_][A-Za-z0-9_]*)=(.*)$", line)
    if not m:
        return None
    key, raw = m.group(1), m.group(2).strip()
    if raw.startswith('"') and raw.endswith('"') and len(raw) >= 2:
        raw = raw[1:-1].replace('\\"', '"').replace("\\n", "\n")
    return (key, raw)


def _format_env_value(value: str) -> str:
    """Format a value for .env: quote if it contains special chars."""
    if not value:
        return ""
    if re.search(r'[\s#"\\\n]', value):
        return '"' + value.replace("\\", "\\\\").replace('"', '\\"').replace("\n", "\\n") + '"'
    return value


def _config_value_to_env_str(v: str | list[str] | int | float | bool | None) -> str:
    """Convert a config value to .env string."""
    if isinstance(v, list):
        return ",".join(str(x) for x in v)
    if v is None:
        return ""
    if isinstance(v, bool):
        return "true" if v else "false"
    return str(v)


class Settings(BaseSettings):
    model_config = {
        "env_prefix": _ENV_PREFIX,
        "env_file_encoding": "utf-8",
    }

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        # Load .env from _ENV_FILE (patchable in tests)
        return (
            init_settings,
            env_settings,
            DotEnvSettingsSource(
                settings_cls,
                env_file=_ENV_FILE,
                env_file_encoding="utf-8",
            ),
            file_secret_settings,
        )

    # Database
    db_path: Path = Path("./data/linkwatch.db")

    # Logging
    log_level: str = "info"

    # Probe backend: "system" uses the host OS, "mock" generates fake readings
    probe_mode: str = "system"
    wifi_interface: str | None = None

    # Polling
    polling_interval_seconds: int = 5
    initial_delay_seconds: float = 0.5

    # Notifications
    show_notifications: bool = True
    webhook_url: str | None = None

    # Ping targets
    # Env: LINKWATCH_CUSTOM_PING_TARGETS="9.9.9.9,example.com"
    custom_ping_targets: Annotated[list[str], NoDecode] = []
    primary_dns: str = "8.8.8.8"
    secondary_dns: str = "1.1.1.1"
    ping_timeout_ms: int = 2000

    # DNS probe
    dns_query_name: str = "google.com"
    dns_timeout_seconds: float = 3.0

    # HTTP probe
    http_probe_url: str = "http://www.msftconnecttest.com/connecttest.txt"
    http_probe_marker: str = "Microsoft Connect Test"
    http_timeout_ms: int = 5000

    # Alerts
    alert_signal_low_threshold: int = 30
    alert_latency_high_ms: int = 100
    alert_cooldown_seconds: int = 60

    # Traceroute hop lookup by IP when the hostname gives no location
    geoip_enabled: bool = True
    geoip_url: str = "http://ip-api.com/batch"

    # Data retention
    raw_data_retention_days: int = 7
    alert_retention_days: int = 365
    retention_interval_seconds: int = 3600

    # Server
    host: str = "0.0.0.0"
    port: int = 8000

    # HTTP Basic Auth (disabled when no password is set)
    auth_username: str = "admin"
    auth_password: str | None = None

    @field_validator("custom_ping_targets", mode="before")
    @classmethod
    def parse_ping_targets(cls, v: object) -> list[str]:
        """Parse comma-separated string or list."""
        if isinstance(v, str):
            return [s.strip() for s in v.split(",") if s.strip()]
        if isinstance(v, list):
            return [s.strip() for s in v if s and s.strip()]
        return []

    def dns_servers(self) -> list[str]:
        """Return the configured resolvers in probe order."""
        return [self.primary_dns, self.secondary_dns]


def save_config(values: dict[str, str | list[str] | int | float | bool | None]) -> None:
    """Save configuration to .env file.

    Only stores keys that correspond to valid Settings fields.
    Merges with existing .env (preserves non-LINKWATCH_* lines and other vars).
    """
    valid_fields = set(Settings.model_fields.keys())
    filtered = {k: v for k, v in values.items() if k in valid_fields}

    # Read existing .env: keep foreign lines as-is, collect LINKWATCH_* into dict
    other_lines: list[str] = []
    own_vars: dict[str, str] = {}
    if _ENV_FILE.exists():
        with open(_ENV_FILE, encoding="utf-8") as f:
            for line in f:
                parsed = _parse_env_line(line)
                if parsed is None:
                    other_lines.append(line.rstrip("\n"))
                else:
                    key, val = parsed
                    if key.startswith(_ENV_PREFIX):
                        own_vars[key] = val
                    else:
                        other_lines.append(line.rstrip("\n"))

    for name, val in filtered.items():
        own_vars[_field_to_env_key(name)] = _config_value_to_env_str(val)

    # Write: other lines first, then LINKWATCH_* in stable order
    with open(_ENV_FILE, "w", encoding="utf-8") as f:
        for line in other_lines:
            f.write(line + "\n")
        if other_lines:
            f.write("\n")
        for key in sorted(own_vars):
            f.write(f"{key}={_format_env_value(own_vars[key])}\n")


def load_config() -> Settings:
    """Load configuration from .env and environment (env overrides .env)."""
    return Settings()


settings = Settings()
