"""Pytest configuration and shared fixtures for buildplan tests."""

import logging

import pytest

from buildplan import output
from buildplan.environment import Environment
from buildplan.registry import ModuleRegistry


@pytest.fixture(autouse=True)
def _reset_output_state():
    """Keep the CLI output module's globals from leaking between tests."""
    yield
    output.set_verbose(False)
    output.init_timer(None)
    logging.getLogger().setLevel(logging.WARNING)


@pytest.fixture
def steam_registry() -> ModuleRegistry:
    """Core <- Net <- App, with App dynamically loading SteamIntegration on desktop platforms."""
    return ModuleRegistry.from_dicts(
        [
            {"name": "Core"},
            {"name": "Net", "public": ["Core"]},
            {"name": "SteamIntegration", "public": ["Net"]},
            {
                "name": "App",
                "public": ["Net"],
                "conditional": [{"when": {"platform": ["Win64", "Linux", "Mac"]}, "dynamic": ["SteamIntegration"]}],
            },
        ]
    )


@pytest.fixture
def win64() -> Environment:
    return Environment.create("Win64")


@pytest.fixture
def android() -> Environment:
    return Environment.create("Android", architecture="arm64")
