"""Centralized collector settings using pydantic-settings.

This module provides a single source of truth for all collector configuration
loaded from environment variables. Uses pydantic for automatic validation,
type coercion, and documentation.
"""

from functools import lru_cache
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Collector configuration loaded from environment variables.

    Defaults target the NSX Operator deployment. Override via environment
    variables as documented per field.
    """

    model_config = SettingsConfigDict(
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Source checkout
    repo_url: str = Field(
        default="https://github.com/vmware-tanzu/nsx-operator",
        description="Git repository holding the instrumented sources",
        validation_alias="COVERAGE_REPO_URL",
    )
    work_root: Path = Field(
        default=Path("/root"),
        description="Directory the repository is cloned into",
        validation_alias="COVERAGE_WORK_ROOT",
    )
    src_dir: str = Field(
        default="nsx-operator",
        description="Name of the checkout directory under work_root",
        validation_alias="COVERAGE_SRC_DIR",
    )

    # Cluster targets
    namespace: str = Field(
        default="vmware-system-nsx",
        description="Namespace of the instrumented deployment",
        validation_alias="COVERAGE_NAMESPACE",
    )
    deployment: str = Field(
        default="nsx-ncp",
        description="Deployment restarted before collection",
        validation_alias="COVERAGE_DEPLOYMENT",
    )
    pod_label_selector: str = Field(
        default="component=nsx-ncp",
        description="Label selector matching the deployment's pods",
        validation_alias="COVERAGE_POD_LABEL_SELECTOR",
    )
    container: str = Field(
        default="nsx-operator",
        description="Container running the instrumented binary",
        validation_alias="COVERAGE_CONTAINER",
    )
    process_name: str = Field(
        default="manager",
        description="Process name signalled with pkill inside the container",
        validation_alias="COVERAGE_PROCESS_NAME",
    )

    # Coverage artifacts
    coverage_dir: Path = Field(
        default=Path("/tmp/nsx-operator"),
        description="Directory the instrumented binary writes GOCOVERDIR data to",
        validation_alias="COVERAGE_DIR",
    )
    merged_dir: str = Field(
        default="merged",
        description="Merged coverage directory, relative to the checkout",
        validation_alias="COVERAGE_MERGED_DIR",
    )
    coverage_out: str = Field(
        default="coverage-overall.txt",
        description="Text coverage profile, relative to the checkout",
        validation_alias="COVERAGE_OUT",
    )

    # Toolchain
    go_version: str = Field(
        default="1.23.1",
        description="Go release installed when go is missing",
        validation_alias="COVERAGE_GO_VERSION",
    )
    go_install_root: Path = Field(
        default=Path("/usr/local"),
        description="Directory the Go archive is extracted under",
        validation_alias="COVERAGE_GO_INSTALL_ROOT",
    )
    package_manager: str = Field(
        default="tdnf",
        description="Package manager used to install missing tools",
        validation_alias="COVERAGE_PACKAGE_MANAGER",
    )

    # Polling behavior
    timeout_seconds: int = Field(
        default=60,
        gt=0,
        description="Upper bound for each pod wait loop",
        validation_alias="COVERAGE_TIMEOUT",
    )
    sleep_interval_seconds: int = Field(
        default=5,
        gt=0,
        description="Delay between pod status polls",
        validation_alias="COVERAGE_SLEEP_INTERVAL",
    )
    interactive: bool = Field(
        default=True,
        description="Wait for Ctrl+D before triggering the coverage dump",
        validation_alias="COVERAGE_INTERACTIVE",
    )

    # Logging configuration
    log_level: str = Field(
        default="INFO",
        validation_alias="LOG_LEVEL",
        description="Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
    )
    json_logs: bool = Field(
        default=False,
        validation_alias="JSON_LOGS",
        description="Emit JSON formatted logs instead of colored console output",
    )
    run_ids: bool = Field(
        default=True,
        validation_alias="RUN_IDS",
        description="Tag every log record with the run ID",
    )

    @property
    def source_path(self) -> Path:
        """Absolute path of the repository checkout."""
        return self.work_root / self.src_dir

    @property
    def go_root(self) -> Path:
        """GOROOT of the installed toolchain."""
        return self.go_install_root / "go"


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Load settings once per process.

    Loading is deferred to first use so that invalid environment values
    surface as a validation error the CLI can report, not an import failure.
    """
    return Settings()
