"""
Build dependency provisioning.

Installs the system tools needed to process coverage data (git, make, wget,
build-essential) through the host package manager, and the Go toolchain from
the official release archives. Every check runs before its install, so
repeated runs change nothing on a provisioned host.
"""

import os
import platform
import tarfile
from pathlib import Path

import httpx

from coverage_collector.constants import (
    BUILD_ESSENTIAL_PACKAGE,
    GO_ARCH_ALIASES,
    GO_DOWNLOAD_BASE_URL,
    GO_DOWNLOAD_TIMEOUT,
    LOCAL_BIN_DIR,
)
from coverage_collector.errors import CommandError, DependencyInstallError
from coverage_collector.observability.logging import CollectorLogger
from coverage_collector.settings import Settings, get_settings
from coverage_collector.utils.process import command_exists, run_command

REQUIRED_COMMANDS = ("git", "make", "wget")


def package_exists(package: str) -> bool:
    """Check whether an RPM package is installed."""
    result = run_command(["rpm", "-q", package], capture=True, check=False)
    return result.returncode == 0


class SystemToolsInstaller:
    """Install missing system tools with the host package manager."""

    def __init__(self, package_manager: str = "tdnf"):
        self.package_manager = package_manager
        self.logger = CollectorLogger(self.__class__.__name__)

    def _pm(self, tool: str, *args: str) -> None:
        try:
            run_command([self.package_manager, *args])
        except CommandError as e:
            raise DependencyInstallError(tool, str(e), cause=e) from e

    def needs_update(self) -> bool:
        """Whether anything is missing, so the package index should be refreshed first."""
        if not all(command_exists(name) for name in REQUIRED_COMMANDS):
            return True
        return not package_exists(BUILD_ESSENTIAL_PACKAGE)

    def install_if_missing(self, package: str, command: str | None = None) -> bool:
        """
        Install a package unless its command is already available.

        Args:
            package: Package to install
            command: Command provided by the package, defaults to the package name

        Returns:
            True if the package was installed
        """
        command = command or package
        if command_exists(command):
            self.logger.info(f"{command} is already installed")
            return False

        self.logger.info(f"{command} not found, installing {package}...")
        self._pm(package, "install", "-y", package)
        return True

    def install(self) -> None:
        self.logger.log_step_start("install_tools", "Installing base tools and dependencies...")

        if self.needs_update():
            self.logger.info("Updating package manager...")
            self._pm(self.package_manager, "update", "-y")

        for name in REQUIRED_COMMANDS:
            self.install_if_missing(name)

        if package_exists(BUILD_ESSENTIAL_PACKAGE):
            self.logger.info("Build-essential is already installed")
        else:
            self.logger.info("Build-essential not found, installing...")
            self._pm(BUILD_ESSENTIAL_PACKAGE, "install", "-y", BUILD_ESSENTIAL_PACKAGE)


def go_archive_name(version: str, machine: str | None = None) -> str:
    """Release archive name for this host, e.g. go1.23.1.linux-amd64.tar.gz."""
    machine = (machine or platform.machine()).lower()
    arch = GO_ARCH_ALIASES.get(machine)
    if arch is None:
        raise DependencyInstallError("go", f"unsupported architecture {machine}")
    return f"go{version}.linux-{arch}.tar.gz"


class GoToolchainInstaller:
    """
    Install the Go toolchain and export it into the environment.

    The archive is fetched from go.dev, extracted under the install root and
    the PATH/GOROOT exports are persisted to ~/.bashrc for later shells.
    """

    def __init__(
        self,
        collector_settings: Settings | None = None,
        bashrc: Path | None = None,
        http_client: httpx.Client | None = None,
    ):
        self.settings = collector_settings or get_settings()
        self.bashrc = bashrc or Path.home() / ".bashrc"
        self.http_client = http_client
        self.logger = CollectorLogger(self.__class__.__name__)

    @property
    def export_lines(self) -> list[str]:
        go_bin = self.settings.go_root / "bin"
        return [
            f"export PATH={LOCAL_BIN_DIR}:{go_bin}:$PATH",
            f"export GOROOT={self.settings.go_root}",
        ]

    def setup_environment(self) -> None:
        """Export PATH and GOROOT into the current process."""
        go_bin = str(self.settings.go_root / "bin")
        path_entries = os.environ.get("PATH", "").split(os.pathsep)
        prefix = [entry for entry in (LOCAL_BIN_DIR, go_bin) if entry not in path_entries]
        os.environ["PATH"] = os.pathsep.join(prefix + path_entries)
        os.environ["GOROOT"] = str(self.settings.go_root)

    def persist_environment(self) -> None:
        """Append the exports to ~/.bashrc unless they are already there."""
        existing = self.bashrc.read_text(encoding="utf-8") if self.bashrc.exists() else ""
        missing = [line for line in self.export_lines if line not in existing]
        if not missing:
            return

        with self.bashrc.open("a", encoding="utf-8") as handle:
            if existing and not existing.endswith("\n"):
                handle.write("\n")
            handle.write("\n".join(missing) + "\n")

    def download(self, archive: str) -> Path:
        """Download a release archive into the work root."""
        url = f"{GO_DOWNLOAD_BASE_URL}/{archive}"
        target = self.settings.work_root / archive
        self.logger.info(f"Downloading {url}")

        http = self.http_client or httpx.Client(
            timeout=GO_DOWNLOAD_TIMEOUT, follow_redirects=True
        )
        try:
            self.settings.work_root.mkdir(parents=True, exist_ok=True)
            with http.stream("GET", url) as response:
                response.raise_for_status()
                with target.open("wb") as handle:
                    for chunk in response.iter_bytes():
                        handle.write(chunk)
        except httpx.HTTPError as e:
            raise DependencyInstallError("go", f"download of {url} failed: {e}", cause=e) from e
        except OSError as e:
            raise DependencyInstallError("go", f"cannot write {target}: {e}", cause=e) from e
        finally:
            if self.http_client is None:
                http.close()

        return target

    def extract(self, archive_path: Path) -> None:
        try:
            with tarfile.open(archive_path, "r:gz") as tar:
                tar.extractall(self.settings.go_install_root, filter="tar")
        except (tarfile.TarError, OSError) as e:
            raise DependencyInstallError("go", f"cannot extract {archive_path}: {e}", cause=e) from e

    def install(self) -> bool:
        """
        Install Go if it is not already on PATH.

        Returns:
            True if the toolchain was installed by this call
        """
        self.logger.log_step_start("install_go", "Installing Go language and test tools...")

        if command_exists("go"):
            self.logger.info("Go is already installed")
            self.setup_environment()
            return False

        self.logger.info("Go not found, installing...")
        archive_path = self.download(go_archive_name(self.settings.go_version))
        self.extract(archive_path)
        self.persist_environment()
        self.setup_environment()

        self.logger.info(f"Go {self.settings.go_version} installed successfully")
        return True
