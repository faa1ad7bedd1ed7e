"""
Windy Observations Integration Tests

Run the real WindyClient and SignalKClient against the in-process
simulator (tests/fixtures/simulator.py), served on a random local port by
aiohttp's TestServer. No external services are needed.

Running:
    pytest tests/integration/ -v
"""
