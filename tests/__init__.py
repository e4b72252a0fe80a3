"""
Tile Server Test Suite

Structure:
- unit/: Unit tests for individual components (no network)
- integration/: HTTP surface tests through FastAPI's TestClient, upstreams faked
- conftest.py: shared fixtures (fake fetcher, sample images)
"""
