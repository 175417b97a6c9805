"""
Tests for pipeline.export_storybook module.
"""

import json
from datetime import datetime
from unittest.mock import patch

import httpx
import pytest

from core.models import Storybook, StoryPage
from pipeline.export_storybook import (
    fetch_image_data_urls,
    render_storybook_html,
    save_storybook,
)


@pytest.fixture
def storybook() -> Storybook:
    return Storybook(
        transcription="Went to the <beach>",
        story="Mia & Sam played. They laughed.",
        pages=[
            StoryPage(index=0, sentence="Mia & Sam played.", image_url="https://img.example/1.png"),
            StoryPage(index=1, sentence="They <laughed>.", error="content policy"),
        ],
        created_at=datetime(2024, 5, 1, 9, 30, 0),
    )


def mock_transport_client(handler):
    """Patch httpx.AsyncClient so requests go to an in-memory handler."""
    real_client = httpx.AsyncClient

    def factory(**kwargs):
        return real_client(transport=httpx.MockTransport(handler), **kwargs)

    return patch.object(httpx, "AsyncClient", side_effect=factory)


class TestRenderStorybookHtml:
    """Tests for render_storybook_html function."""

    def test_one_page_per_sentence(self, storybook):
        html = render_storybook_html(storybook)
        assert html.count('<div class="page">') == 2

    def test_text_is_escaped(self, storybook):
        html = render_storybook_html(storybook)

        assert "Mia &amp; Sam played." in html
        assert "They &lt;laughed&gt;." in html
        assert "<laughed>" not in html

    def test_missing_image_placeholder(self, storybook):
        html = render_storybook_html(storybook)

        assert '<img src="https://img.example/1.png" alt="Page 1">' in html
        assert "Illustration unavailable" in html

    def test_title(self, storybook):
        html = render_storybook_html(storybook, title="Beach <Day>")

        assert "<title>Beach &lt;Day&gt;</title>" in html
        assert html.startswith("<!DOCTYPE html>")

    def test_image_source_override(self, storybook):
        html = render_storybook_html(storybook, image_sources={0: "data:image/png;base64,AAA"})

        assert 'src="data:image/png;base64,AAA"' in html
        assert "https://img.example/1.png" not in html


class TestFetchImageDataUrls:
    """Tests for fetch_image_data_urls function."""

    @pytest.mark.asyncio
    async def test_inlines_downloaded_images(self, storybook):
        def handler(request):
            return httpx.Response(200, content=b"png-bytes", headers={"content-type": "image/png"})

        with mock_transport_client(handler):
            sources = await fetch_image_data_urls(storybook.pages)

        assert list(sources) == [0]
        assert sources[0] == "data:image/png;base64,cG5nLWJ5dGVz"

    @pytest.mark.asyncio
    async def test_failed_download_skipped(self, storybook):
        def handler(request):
            return httpx.Response(404)

        with mock_transport_client(handler):
            sources = await fetch_image_data_urls(storybook.pages)

        assert sources == {}


class TestSaveStorybook:
    """Tests for save_storybook function."""

    @pytest.mark.asyncio
    async def test_writes_html_and_json(self, storybook, tmp_path):
        html_path = await save_storybook(storybook, tmp_path / "out")

        assert html_path == tmp_path / "out" / "storybook-20240501-093000.html"
        assert "Mia &amp; Sam played." in html_path.read_text(encoding="utf-8")

        data = json.loads(html_path.with_suffix(".json").read_text(encoding="utf-8"))
        assert data["story"] == storybook.story
        assert len(data["pages"]) == 2
        assert data["pages"][1]["error"] == "content policy"

    @pytest.mark.asyncio
    async def test_embed_images(self, storybook, tmp_path):
        def handler(request):
            return httpx.Response(200, content=b"x", headers={"content-type": "image/jpeg"})

        with mock_transport_client(handler):
            html_path = await save_storybook(storybook, tmp_path, embed_images=True)

        assert "data:image/jpeg;base64," in html_path.read_text(encoding="utf-8")
