"""dayplan Test Suite

Test organization:
- unit/core/: Logging setup
- unit/selection/: Selection engine (scoring, dependencies, validator,
  capacity, engine facade, sessions, context rules, config)

Running tests:
    # All tests
    pytest

    # Specific module
    pytest tests/unit/selection/test_dependencies.py
"""
