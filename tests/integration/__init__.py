"""
alpacabridge Integration Tests

Tests that exercise the client over real HTTP, against the in-process
aiohttp simulator from tests/conftest.py.

Tests in test_live_simulator.py additionally talk to an external Alpaca
server (for example ASCOM Alpaca Simulators / OmniSim) and are skipped
when none is listening:

    ALPACA_HOST=localhost ALPACA_PORT=32323 pytest tests/integration/ -v -m live
"""
