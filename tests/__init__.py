"""
alpacabridge Test Suite

Test Organization:
    tests/
    ├── __init__.py          # This file
    ├── conftest.py          # In-process Alpaca simulator fixtures
    ├── integration/         # Wire-level tests over HTTP
    └── unit/                # Pure unit tests (no network)

Running Tests:
    # Run all tests
    pytest tests/

    # Run integration tests only
    pytest tests/integration/

    # Include tests against an external Alpaca server
    ALPACA_HOST=localhost ALPACA_PORT=32323 pytest tests/ -m live

Requirements:
    pip install -e ".[test]"
"""
