"""
External command helpers.

Every package manager, git and go invocation goes through run_command so that
failures surface uniformly as CommandError.
"""

import logging
import shutil
import subprocess
from collections.abc import Sequence
from pathlib import Path

from coverage_collector.errors import CommandError

logger = logging.getLogger(__name__)


def command_exists(name: str) -> bool:
    """Check whether an executable is on PATH."""
    return shutil.which(name) is not None


def run_command(
    command: Sequence[str],
    cwd: Path | str | None = None,
    capture: bool = False,
    check: bool = True,
) -> subprocess.CompletedProcess:
    """
    Run an external command.

    Args:
        command: Program and arguments
        cwd: Working directory
        capture: Capture stdout/stderr instead of inheriting the console
        check: Raise CommandError on a non-zero exit status

    Returns:
        The completed process

    Raises:
        CommandError: If the program is missing, or exits non-zero with check set
    """
    args = [str(part) for part in command]
    logger.debug(f"> {' '.join(args)}", extra={"command": args})

    try:
        result = subprocess.run(
            args,
            cwd=cwd,
            capture_output=capture,
            text=True,
        )
    except OSError as e:
        raise CommandError(args, None, str(e), cause=e) from e

    if check and result.returncode != 0:
        raise CommandError(args, result.returncode, result.stderr or "")
    return result
