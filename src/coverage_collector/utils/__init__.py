"""
Utils package - Helper modules for coverage collection.

Contains helper modules for:
- Kubernetes pod and deployment access
- External command execution
- Bounded polling
- Coverage directory housekeeping
"""

from coverage_collector.utils.polling import poll_until
from coverage_collector.utils.process import command_exists, run_command

__all__ = [
    "command_exists",
    "poll_until",
    "run_command",
]
