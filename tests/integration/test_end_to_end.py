# Copyright (c) 2025 Henru Wang
# All rights reserved.

"""End-to-end tests: real component files, session, watcher and display.

Validates:
- Enumeration honours the node_modules exclusion
- Ancestor search across named and default imports
- Non-valid provide syntax surfaces as a sentinel entry
- File edits delivered by the watcher invalidate the right entries
"""

import asyncio
import time
from pathlib import Path
from typing import Callable

import pytest
import pytest_asyncio

from provide_seeker.config import Config
from provide_seeker.file_watcher import FileWatcher
from provide_seeker.hover_formatter import NON_VALID_LINE, build_display_payload
from provide_seeker.models import NON_VALID_PROVIDE, FileEventKind
from provide_seeker.session import AnalysisSession
from provide_seeker.text_scanner import parse_provide_calls


async def wait_until(condition: Callable[[], bool], timeout: float = 3.0) -> bool:
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if condition():
            return True
        await asyncio.sleep(0.05)
    return condition()


@pytest_asyncio.fixture
async def session(sample_project: Path, tmp_path: Path) -> AnalysisSession:
    session = AnalysisSession(
        project_root=sample_project, config=Config(config_path=tmp_path / "absent.yml")
    )
    await session.refresh_universe()
    return session


def names(records):
    return {record.name for record in records}


@pytest.mark.asyncio
async def test_universe_excludes_node_modules(session):
    assert len(session.file_universe) == 6
    assert all("node_modules" not in path for path in session.file_universe)


@pytest.mark.asyncio
async def test_card_ancestors(session):
    records = await session.find_providing_ancestors("Card")

    assert names(records) == {"Layout.vue", "App.vue", "Broken.vue"}
    by_name = {record.name: record for record in records}
    assert parse_provide_calls(by_name["App.vue"].provides) == [
        ("user", "user"),
        ("locale", "en"),
    ]
    assert parse_provide_calls(by_name["Layout.vue"].provides) == [("theme", "dark")]
    assert parse_provide_calls(by_name["Broken.vue"].provides) == [NON_VALID_PROVIDE]


@pytest.mark.asyncio
async def test_each_ancestor_reported_once(session):
    """Card is reachable through Sidebar and Layout; Layout appears once."""
    records = await session.find_providing_ancestors("Card")
    sources = [record.source for record in records]
    assert len(sources) == len(set(sources))


@pytest.mark.asyncio
async def test_intermediate_and_top_components(session):
    assert names(await session.find_providing_ancestors("Sidebar")) == {"Layout.vue", "App.vue"}
    assert await session.find_providing_ancestors("App") == []
    assert await session.find_providing_ancestors("Orphan") == []


@pytest.mark.asyncio
async def test_display_payload_for_card(session):
    records = await session.find_providing_ancestors("Card")

    payload = build_display_payload(records)

    assert payload is not None
    assert payload["line"] == 0
    assert payload["ancestor_count"] == 3
    assert "- **theme**: dark" in payload["hover"]
    assert "- **locale**: en" in payload["hover"]
    assert NON_VALID_LINE in payload["hover"]


@pytest.mark.asyncio
async def test_edit_then_notify(session, sample_project):
    await session.find_providing_ancestors("Card")
    layout = sample_project / "src" / "components" / "Layout.vue"
    layout_path = str(layout.resolve())

    layout.write_text(
        "<template><Card /></template>\n<script setup>\nimport Card from './Card.vue'\n</script>\n"
    )
    session.handle_file_event(FileEventKind.CHANGED, layout_path)

    assert names(await session.find_providing_ancestors("Card")) == {"App.vue", "Broken.vue"}


@pytest.mark.asyncio
async def test_delete_then_notify(session, sample_project):
    await session.find_providing_ancestors("Card")
    broken = sample_project / "src" / "components" / "Broken.vue"
    broken_path = str(broken.resolve())

    broken.unlink()
    session.handle_file_event(FileEventKind.DELETED, broken_path)

    assert broken_path not in session.file_universe
    assert names(await session.find_providing_ancestors("Card")) == {"Layout.vue", "App.vue"}


@pytest.mark.integration
@pytest.mark.asyncio
async def test_watcher_drives_invalidation(session, sample_project):
    """A real edit reaches the session through the watcher on the event loop."""
    watcher = FileWatcher(project_root=str(sample_project))
    changed = []
    watcher.register_callback(FileEventKind.CHANGED, session.on_change)
    watcher.register_callback(FileEventKind.CHANGED, changed.append)
    watcher.start(loop=asyncio.get_running_loop())

    try:
        records = await session.find_providing_ancestors("Layout")
        assert names(records) == {"App.vue"}

        app = sample_project / "src" / "App.vue"
        await asyncio.sleep(0.1)
        app.write_text(
            "<template><Layout /></template>\n<script setup>\n"
            "import Layout from './components/Layout.vue'\n"
            "provide('locale', 'fr')\n</script>\n"
        )

        assert await wait_until(lambda: any(Path(p).name == "App.vue" for p in changed))
        records = await session.find_providing_ancestors("Layout")
        assert parse_provide_calls(records[0].provides) == [("locale", "fr")]
    finally:
        watcher.stop()
