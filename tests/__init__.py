"""
Tests package - Unit test suite for the coverage collector.

Contains:
- unit/: Unit tests for individual components, with the Kubernetes API,
  external commands and sleeps replaced by fakes
"""
