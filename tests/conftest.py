import os
import sys
from contextlib import contextmanager
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

# Add the project root directory to Python path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from sigri_worker.config import Settings
from sigri_worker.db import create_db_engine, create_session_factory, init_schema
from sigri_worker.job_store import JobStore
from sigri_worker.models.job import SearchType
from sigri_worker.workflow import steps


def pytest_configure(config):
    """Add custom markers"""
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "integration: Integration tests")
    config.addinivalue_line("markers", "e2e: End-to-end tests")


class FakeElement:
    def __init__(self, browser, locator):
        self.browser = browser
        self.locator = locator

    def click(self, timeout_ms):
        self.browser.actions.append(("click", self.locator))

    def fill(self, value):
        self.browser.actions.append(("fill", self.locator, value))

    def press(self, key):
        self.browser.actions.append(("press", self.locator, key))


class FakeDownload:
    suggested_filename = "poligono.kmz"

    def __init__(self, content=b"PK\x03\x04kmz"):
        self.content = content

    def save_as(self, path):
        Path(path).write_bytes(self.content)


class FakeBrowser:
    """In-memory BrowserSession: only locators in ``visible`` are found."""

    def __init__(self, visible=(), downloads=None):
        self.visible = set(visible)
        self.downloads = dict(downloads or {})
        self.actions = []
        self.opened = 0
        self.closed = False

    def goto(self, url):
        self.actions.append(("goto", url))

    def pause(self, ms):
        pass

    def find(self, locator, timeout_ms):
        self.actions.append(("find", locator))
        return FakeElement(self, locator) if locator in self.visible else None

    def click_at(self, x, y):
        self.actions.append(("click_at", x, y))

    def download(self, trigger, timeout_ms):
        trigger.click(timeout_ms)
        return self.downloads.get(trigger.locator)

    def screenshot(self, path):
        self.actions.append(("screenshot", path))

    @contextmanager
    def factory(self):
        self.opened += 1
        try:
            yield self
        finally:
            self.closed = True

    def clicked(self):
        return [a[1] for a in self.actions if a[0] == "click"]


def portal(search_type=SearchType.CAR, with_download=True, with_layers=True, with_input=True):
    """A FakeBrowser that looks like the map portal after a successful search."""
    visible = {
        steps.SEARCH_SCOPE_LOCATORS[0],
        steps.SEARCH_TYPE_LOCATORS[search_type][0],
    }
    if with_input:
        visible.add(steps.SEARCH_INPUT)
    if with_layers:
        visible.update({steps.LAYER_CONTROL_LOCATORS[0], steps.ENABLE_ALL_LAYERS_LOCATORS[0]})
    downloads = {}
    if with_download:
        visible.add(steps.DOWNLOAD_LOCATORS[0])
        downloads[steps.DOWNLOAD_LOCATORS[0]] = FakeDownload()
    return FakeBrowser(visible=visible, downloads=downloads)


@pytest.fixture
def db_engine(tmp_path):
    engine = create_db_engine(f"sqlite:///{tmp_path / 'automation.db'}")
    init_schema(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(db_engine):
    return create_session_factory(db_engine)


class TickingClock:
    def __init__(self, start=datetime(2026, 1, 5, 12, 0, tzinfo=timezone.utc)):
        self.now = start

    def __call__(self):
        self.now += timedelta(seconds=1)
        return self.now


@pytest.fixture
def clock():
    return TickingClock()


@pytest.fixture
def job_store(session_factory, clock):
    return JobStore(session_factory, clock=clock)


@pytest.fixture
def settings(tmp_path):
    data_dir = tmp_path / "data"
    data_dir.mkdir()
    return Settings(
        DATABASE_URL=f"sqlite:///{tmp_path / 'automation.db'}",
        DATA_DIR=str(data_dir),
        BACKEND_UPLOADS_BASE="/app/app/uploads",
    )


@pytest.fixture
def car_payload():
    return {"search": {"type": "CAR", "value": "MT-5107925-0A1B2C3D"}}


@pytest.fixture
def make_portal():
    return portal


@pytest.fixture
def fake_download():
    return FakeDownload()
