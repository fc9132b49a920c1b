"""Shared configuration for the adtjson test suite."""

import pytest

import adtjson.runtime


def pytest_configure(config):
    """Report tests by describe block rather than by file path."""
    reporter = config.pluginmanager.getplugin("terminal")
    if reporter:
        reporter.TerminalReporter.showfspath = False


@pytest.fixture
def rt():
    """The runtime module generated code binds to `_rt`."""
    return adtjson.runtime
