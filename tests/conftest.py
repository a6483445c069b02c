"""Shared fixtures for tasktab tests."""

from __future__ import annotations

import asyncio
from dataclasses import replace
from pathlib import Path
from unittest.mock import Mock

import pytest

from tasktab.config import Config
from tasktab.core.classification import classify_color
from tasktab.core.engine import StateEngine
from tasktab.core.models import AppState, Background, Theme
from tasktab.core.persistence import StatePersister


class FakeClassifier:
    """Classifier returning a fixed theme without touching the network."""

    def __init__(self, theme: Theme = Theme.SKYBLUE):
        self.theme = theme
        self.urls: list[str] = []

    async def classify_url(self, url: str) -> Theme:
        self.urls.append(url)
        return self.theme

    def classify_color(self, color: str) -> Theme:
        return classify_color(color)


class GatedClassifier:
    """Classifier whose answers are released by the test, in any order."""

    def __init__(self):
        self.pending: list[asyncio.Future[Theme]] = []

    async def classify_url(self, url: str) -> Theme:
        future: asyncio.Future[Theme] = asyncio.get_running_loop().create_future()
        self.pending.append(future)
        return await future

    def classify_color(self, color: str) -> Theme:
        return classify_color(color)


@pytest.fixture
def config(tmp_path: Path) -> Config:
    """Create config rooted in a temporary directory."""
    return Config(data_dir=tmp_path / "data", log_file=tmp_path / "tasktab.log")


@pytest.fixture
def two_default_config(config: Config) -> Config:
    """Create config with a two-image default pool."""
    return replace(
        config,
        default_backgrounds=(
            Background(url="https://images.unsplash.com/photo-a?w=1920&h=1080", theme=Theme.SEPIA),
            Background(url="https://images.unsplash.com/photo-b?w=1920&h=1080", theme=Theme.BLACK),
        ),
    )


@pytest.fixture
def mock_persister() -> Mock:
    """Create mock persister that records save requests."""
    return Mock(spec=StatePersister)


@pytest.fixture
def classifier() -> FakeClassifier:
    return FakeClassifier()


@pytest.fixture
def engine(config: Config, mock_persister: Mock, classifier: FakeClassifier) -> StateEngine:
    """Create engine over a fresh default state."""
    return StateEngine(AppState(), mock_persister, classifier, config)


@pytest.fixture
def gated_classifier() -> GatedClassifier:
    return GatedClassifier()
