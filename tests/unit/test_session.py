"""Unit tests for ViewerSession.

Loads run through asyncio.to_thread; animation runs on a ManualScheduler.
"""

import asyncio
import threading

import pytest

from kanji_lib.animation.scheduler import ManualScheduler
from kanji_lib.api.session import ViewerSession
from kanji_lib.assets.loader import AssetLoader
from kanji_lib.errors import NetworkError
from kanji_lib.overlay import EventWindow, StaticHost
from kanji_lib.schema.normalizer import new_entry


class GatedLoader:
    """Loader whose load for 一 blocks until any other load has started."""

    def __init__(self, inner: AssetLoader):
        self.inner = inner
        self.gate = threading.Event()
        self.documents = {}

    def load_asset(self, entry):
        if entry.chu == '一':
            self.gate.wait(5)
        else:
            self.gate.set()
        document = self.inner.load_asset(new_entry('二'))
        self.documents[entry.chu] = document
        return document


@pytest.fixture
def host():
    return StaticHost(109, 109)


@pytest.fixture
def session(asset_dir, host):
    return ViewerSession(AssetLoader(asset_dir), ManualScheduler(),
                         host=host, window=EventWindow())


def open_entry(session, chu):
    return asyncio.run(session.open_entry(new_entry(chu)))


class TestOpenEntry:
    """Tests for open_entry."""

    def test_success(self, session):
        assert open_entry(session, '二') is True
        assert session.entry.chu == '二'
        assert len(session.strokes) == 2
        assert len(session.guides) == 1
        assert session.error is None
        assert session.loading is False

    def test_overlay_starts_disabled(self, session):
        open_entry(session, '二')
        assert session.overlay is not None
        assert session.drawing is False

    def test_failure_sets_error_state(self, session):
        assert open_entry(session, '三') is False
        assert isinstance(session.error, NetworkError)
        assert session.error_message
        assert session.strokes == []
        assert session.animator is None

    def test_reopen_replaces_overlay(self, session, host):
        open_entry(session, '二')
        count = host.listener_count()
        first_doc = session.document
        open_entry(session, '二')
        assert host.listener_count() == count
        assert first_doc.released
        assert session.document is not first_doc

    def test_stale_load_is_discarded(self, asset_dir, host):
        loader = GatedLoader(AssetLoader(asset_dir))
        session = ViewerSession(loader, ManualScheduler(), host=host)

        async def race():
            return await asyncio.gather(
                session.open_entry(new_entry('一')),
                session.open_entry(new_entry('二')),
            )

        results = asyncio.run(race())

        assert results == [False, True]
        assert session.entry.chu == '二'
        assert session.document is loader.documents['二']
        assert loader.documents['一'].released


class TestModes:
    """Animation and drawing are mutually exclusive."""

    def test_play_disables_drawing_and_clears_ink(self, session, host):
        open_entry(session, '二')
        assert session.toggle_draw() is True
        host.dispatch_pointer('pointerdown', 10, 10)
        host.dispatch_pointer('pointermove', 60, 60)
        assert session.overlay.has_ink

        assert session.play() is True
        assert session.drawing is False
        assert not session.overlay.has_ink
        assert session.animating

    def test_toggle_draw_stops_animation(self, session):
        open_entry(session, '二')
        session.play()
        assert session.toggle_draw() is True
        assert not session.animating

    def test_toggle_draw_off(self, session):
        open_entry(session, '二')
        session.toggle_draw()
        assert session.toggle_draw() is False

    def test_play_without_entry(self, session):
        assert session.play() is False
        assert session.toggle_draw() is False

    def test_clear_ink_leaves_document_untouched(self, session, host):
        open_entry(session, '二')
        session.toggle_draw()
        before = session.document.serialize()
        host.dispatch_pointer('pointerdown', 10, 10)
        host.dispatch_pointer('pointermove', 60, 60)
        assert session.overlay.has_ink

        session.clear_ink()
        assert not session.overlay.has_ink
        assert session.document.serialize() == before
        assert len(session.strokes) == 2


class TestClose:
    """Tests for close()."""

    def test_releases_everything(self, session, host):
        open_entry(session, '二')
        document = session.document
        session.play()
        session.close()
        assert document.released
        assert host.listener_count() == 0
        assert session.animator is None
        assert session.entry is None
        assert session.scheduler.pending == 0

    def test_async_context_manager(self, asset_dir, host):
        async def run():
            async with ViewerSession(AssetLoader(asset_dir), ManualScheduler(),
                                     host=host) as session:
                await session.open_entry(new_entry('二'))
            return session

        session = asyncio.run(run())
        assert session.document is None
        assert host.listener_count() == 0
