"""
Constants used throughout the coverage collector.

This module defines all constant values used by the collector including:
- Pod phase and condition values reported by the cluster
- Annotation used to request a rolling restart
- Coverage artifact naming
- Console color codes for log output
"""

# Pod phase constants (as reported by the API, plus the two synthesized by kubectl)
PHASE_RUNNING = "Running"
PHASE_TERMINATING = "Terminating"
PHASE_NOT_FOUND = "NotFound"

# Condition type constants
CONDITION_READY = "Ready"

# Condition status constants
CONDITION_TRUE = "True"
CONDITION_FALSE = "False"

# Setting this on the pod template is what `kubectl rollout restart` does
RESTARTED_AT_ANNOTATION = "kubectl.kubernetes.io/restartedAt"

# Coverage artifacts written by the Go runtime on exit
COVCOUNTERS_PREFIX = "covcounters."
COVERAGE_FILE_PREVIEW_LIMIT = 5

# Signal sent to the instrumented process to force a counter flush
COVERAGE_DUMP_SIGNAL = "SIGTERM"

# Go toolchain download location
GO_DOWNLOAD_BASE_URL = "https://go.dev/dl"
GO_DOWNLOAD_TIMEOUT = 300
LOCAL_BIN_DIR = "/root/.local/bin"

# Architecture names used by Go release archives
GO_ARCH_ALIASES = {
    "x86_64": "amd64",
    "amd64": "amd64",
    "aarch64": "arm64",
    "arm64": "arm64",
}

# Package that provides the C toolchain on tdnf based hosts
BUILD_ESSENTIAL_PACKAGE = "build-essential"

# Exec timeout for the signal command (seconds)
DEFAULT_EXEC_TIMEOUT = 30

# Exit codes
EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_INTERRUPTED = 130

# ANSI color codes for console logging
COLOR_GREEN = "\033[32m"
COLOR_YELLOW = "\033[33m"
COLOR_RED = "\033[31m"
COLOR_BLUE = "\033[94m"
COLOR_GRAY = "\033[90m"
COLOR_RESET = "\033[0m"
