"""Test suite for cadence.

Test Structure:
- unit/: Unit tests for individual components
  - timeline/: Timeline models, scope, heap, distributions, schedulers, builders, runner
  - config/: Config loading and validation
  - utils/: Logging and numeric helpers
- conftest.py: Shared fixtures and test configuration
"""
