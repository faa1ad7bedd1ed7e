"""
Windy Observations Test Suite

Test Organization:
    tests/
    ├── __init__.py          # This file
    ├── conftest.py          # Shared fixtures
    ├── fixtures/            # Mock collaborators and the API simulator
    ├── integration/         # Real clients against the local simulator
    └── unit/                # Unit tests (no network)

Running Tests:
    pytest tests/
    pytest tests/unit/ -v

Requirements:
    pip install -e .[test]
"""
