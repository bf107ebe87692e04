"""
Pod Coverage Collector - collect Go coverage counters from instrumented pods.

This tool drives a complete coverage collection run against a live cluster:
- Build tooling provisioning (git, make, wget, Go)
- Rolling restart of the instrumented deployment
- SIGTERM delivery to flush coverage counters
- Merging counter files into a function-level report
"""

__version__ = "2.0.0"
