"""Shared pytest configuration for agentmarket tests."""

pytest_plugins = ["agentmarket.testing.conftest"]
