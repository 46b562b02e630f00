"""Shared pytest configuration and fixtures for all tests."""

import os
import warnings

import pytest

from caption_gemini.models import CaptionConfig, CaptionRequest, MediaReference


def pytest_addoption(parser):
    """Add custom command-line options."""
    parser.addoption(
        "--e2e",
        action="store_true",
        default=False,
        help="Run only e2e tests (default: run only unit tests)",
    )


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers",
        "unit: Unit tests that use mocks and don't make real API calls",
    )
    config.addinivalue_line(
        "markers",
        "e2e: End-to-end tests that make real API calls",
    )


def pytest_collection_modifyitems(config, items):
    """Mark tests by directory and skip the suite that was not requested."""
    gemini_key_available = bool(os.getenv("GEMINI_API_KEY"))
    run_e2e = config.getoption("--e2e")

    for item in items:
        if "/e2e/" in item.nodeid:
            item.add_marker(pytest.mark.e2e)
        elif "/unit/" in item.nodeid:
            item.add_marker(pytest.mark.unit)

        if not run_e2e and "e2e" in item.keywords:
            item.add_marker(
                pytest.mark.skip(
                    reason="E2E tests skipped by default. Use --e2e to run them."
                )
            )

        if run_e2e and "unit" in item.keywords:
            item.add_marker(
                pytest.mark.skip(reason="Unit tests skipped when --e2e flag is used.")
            )

        if run_e2e and "e2e" in item.keywords and not gemini_key_available:
            item.add_marker(
                pytest.mark.skip(reason="GEMINI_API_KEY environment variable not set")
            )


@pytest.fixture(autouse=True)
def suppress_warnings():
    """Suppress specific warnings during tests."""
    warnings.filterwarnings("ignore", category=DeprecationWarning)
    warnings.filterwarnings("ignore", category=PendingDeprecationWarning)


@pytest.fixture
def caption_config():
    """Create a basic Gemini caption config."""
    return CaptionConfig(model="gemini-1.5-flash-latest", api_key="test-api-key")


@pytest.fixture
def structured_request():
    """Create a request for structured subtitles."""
    return CaptionRequest(
        prompt="Transcribe this video",
        media=MediaReference(url="https://example.com/a.mp4", content_type="video/mp4"),
        model="gemini-1.5-flash-latest",
        structured=True,
    )


@pytest.fixture
def text_request():
    """Create a request for a free-text caption."""
    return CaptionRequest(
        prompt="Describe the scene",
        media=MediaReference(url="https://example.com/a.mp4", content_type="video/mp4"),
        model="gemini-1.5-flash-latest",
        structured=False,
    )
