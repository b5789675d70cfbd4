"""
StarSync Test Suite
===================

Test Organization
-----------------
- tests/unit/          : Fast unit tests with mocks (no external dependencies)
- tests/integration/   : Integration tests with testcontainers (real PostgreSQL)

Run everything but Docker-backed tests with ``pytest -m "not integration"``.
"""
