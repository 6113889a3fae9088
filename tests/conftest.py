"""Test setup for md2xhtml."""

from __future__ import annotations

import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from md2xhtml.document import ParseSession  # noqa: E402
from md2xhtml.schemas import MarkdownConfig  # noqa: E402


@pytest.fixture
def config() -> MarkdownConfig:
    """Default configuration, independent of MD2XHTML_* variables."""
    return MarkdownConfig()


@pytest.fixture
def smart_config() -> MarkdownConfig:
    """Configuration with the typographic pass enabled."""
    return MarkdownConfig(use_smartypants=True)


@pytest.fixture
def session(config: MarkdownConfig) -> ParseSession:
    """Fresh parse session using the default configuration."""
    return ParseSession(config=config)
