import logging
import os
import sys
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource


# =============================================================================
# Hook Execution Configuration
# =============================================================================


class HookConfig(BaseModel):
    """Hook job settings (nested in Config, uses env_nested_delimiter)."""

    default_active_deadline_seconds: int = 1800  # Used when a hook sets none
    failure_threshold: int = 5  # Failed pod attempts before the job counts as failed
    playbook_mount_path: str = "/tmp/playbook"
    runner_dir: str = "/tmp/runner"
    entrypoint: str = "/bin/entrypoint"

    @property
    def playbook_path(self) -> str:
        return f"{self.playbook_mount_path}/playbook.yml"

    @property
    def runner_command(self) -> list[str]:
        """Command of a playbook hook container."""
        return [self.entrypoint, "ansible-runner", "-p", self.playbook_path, "run", self.runner_dir]


# =============================================================================
# Cluster Configuration
# =============================================================================


class ClusterConfig(BaseModel):
    """Connection settings for one cluster referenced by migration plans."""

    name: str  # Matches the plan's MigCluster reference name
    context: str | None = None  # kubeconfig context; None = current context
    config_file: str | None = None  # kubeconfig path; None = default lookup
    in_cluster: bool = False  # Use the pod's service account instead of kubeconfig


class KubernetesConfig(BaseModel):
    """Kubernetes connection configuration."""

    host_cluster: str = "host"  # Cluster holding MigPlan/MigHook resources
    clusters: list[ClusterConfig] = [ClusterConfig(name="host", in_cluster=True)]


# =============================================================================
# Application Configuration
# =============================================================================


class YamlConfigSettingsSource(PydanticBaseSettingsSource):
    """Load settings from YAML file specified by MIGHOOKS_CONFIG_FILE env var."""

    def get_field_value(self, field: Any, field_name: str) -> tuple[Any, str, bool]:
        """Get the value for a field from the YAML config."""
        yaml_data = self._load_yaml_config()
        field_value = yaml_data.get(field_name)
        return field_value, field_name, False

    def __call__(self) -> dict[str, Any]:
        """Return all settings from YAML file."""
        return self._load_yaml_config()

    def _load_yaml_config(self) -> dict[str, Any]:
        """Load config from YAML file if specified."""
        config_file = os.environ.get("MIGHOOKS_CONFIG_FILE")
        if config_file:
            path = Path(config_file)
            if path.exists():
                return yaml.safe_load(path.read_text()) or {}
        return {}


class LoggingConfig(BaseModel):
    """Logging configuration (nested in Config, uses env_nested_delimiter)."""

    level: str = "INFO"
    format: str = "%(asctime)s %(levelname)-8s [%(name)s] %(message)s"
    date_format: str = "%Y-%m-%d %H:%M:%S"

    @property
    def file(self) -> str | None:
        """Get log file path from MIGHOOKS_LOG_FILE env var."""
        return os.environ.get("MIGHOOKS_LOG_FILE")


class Config(BaseSettings):
    hooks: HookConfig = HookConfig()
    kubernetes: KubernetesConfig = KubernetesConfig()
    logging: LoggingConfig = LoggingConfig()

    model_config = {
        "env_prefix": "MIGHOOKS_",
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "env_nested_delimiter": "__",  # Allows MIGHOOKS_HOOKS__FAILURE_THRESHOLD override
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
        """Customize settings sources to include YAML config.

        Priority (highest to lowest):
        1. init_settings - values passed to Config()
        2. env_settings - environment variables
        3. dotenv_settings - .env file
        4. yaml_settings - MIGHOOKS_CONFIG_FILE yaml
        5. file_secret_settings - secrets from files
        """
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            YamlConfigSettingsSource(settings_cls),
            file_secret_settings,
        )


def configure_logging(config: LoggingConfig) -> None:
    """Configure Python logging based on config.

    Should be called early in operator startup, before the hook engine runs.
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(config.level)

    # Remove existing handlers to avoid duplicates
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    formatter = logging.Formatter(config.format, datefmt=config.date_format)

    if config.file:
        log_path = Path(config.file).expanduser()
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_path)
        file_handler.setLevel(config.level)
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)
    else:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setLevel(config.level)
        console_handler.setFormatter(formatter)
        root_logger.addHandler(console_handler)

    # Reduce noise from third-party libraries
    logging.getLogger("kubernetes").setLevel(logging.WARNING)
    logging.getLogger("urllib3").setLevel(logging.WARNING)
    logging.getLogger("asyncio").setLevel(logging.WARNING)

    logging.debug("Logging configured: level=%s, file=%s", config.level, config.file)
