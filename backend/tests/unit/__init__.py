"""
Unit Tests

Unit tests run in isolation without external dependencies.
The database session and collaborating services are mocked.

These tests are fast and can run without Docker or any services running.
"""
