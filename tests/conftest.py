"""
Root conftest.py - Sets environment variables before any module imports.

This file is loaded by pytest before any test modules, ensuring environment
variables are set before the settings module is imported.
"""

import os

# Set environment variables BEFORE any imports that might load settings
os.environ.setdefault("ENVIRONMENT", "development")
os.environ.setdefault("LOG_LEVEL", "DEBUG")
os.environ.setdefault("HIERARCHY_LOG_DIAGNOSTICS", "true")

import copy

import pytest
from httpx import AsyncClient, ASGITransport

from tests.factories import (
    OTHER_WORKSPACE_ID,
    TIMESTAMP,
    make_ai_prompt,
    make_configuration,
    make_feature_flag,
    make_field_mapping,
    make_story,
    make_template,
    make_workspace,
    uid,
)


# ============================================
# FastAPI Test Client
# ============================================

@pytest.fixture
async def async_client():
    """
    Async HTTP client for testing FastAPI endpoints.

    Uses httpx.AsyncClient with ASGITransport for testing FastAPI.
    """
    # Import app here to ensure env vars are set first
    from plansync.app.main import app

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


# ============================================
# Snapshot Fixtures
# ============================================

@pytest.fixture
def valid_snapshot():
    """A snapshot where every dependent record references a known workspace."""
    return {
        "version": "1.0",
        "timestamp": TIMESTAMP,
        "data": {
            "workspaces": [make_workspace(), make_workspace(OTHER_WORKSPACE_ID, "Lending")],
            "stories": [make_story(uid(1)), make_story(uid(2), OTHER_WORKSPACE_ID)],
            "configurations": [make_configuration(uid(3))],
            "templates": [make_template(uid(4))],
            "fieldMappings": [make_field_mapping(uid(5))],
            "featureFlags": [make_feature_flag(uid(6))],
            "aiPrompts": [make_ai_prompt(uid(7))],
        },
    }


@pytest.fixture
def snapshot_factory(valid_snapshot):
    """Return a deep copy of the valid snapshot for per-test mutation."""
    def factory() -> dict:
        return copy.deepcopy(valid_snapshot)
    return factory
