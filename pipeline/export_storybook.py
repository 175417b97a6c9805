"""
Journal Storybook - Storybook Export

Render a storybook as a standalone, printable HTML page (one page per
sentence) and save it with a JSON sidecar:

- storybook-<timestamp>.html
- storybook-<timestamp>.json
"""

import base64
import html
import json
from pathlib import Path
from typing import Optional

import httpx

from core.logging import get_logger
from core.models import Storybook, StoryPage

logger = get_logger(__name__)

HTTP_TIMEOUT = 30

STORYBOOK_CSS = """
    body { font-family: 'Georgia', serif; max-width: 800px; margin: 0 auto; padding: 20px; background: #f5f5f5; }
    .page { background: white; padding: 40px; margin-bottom: 40px; box-shadow: 0 2px 8px rgba(0,0,0,0.1); page-break-after: always; }
    .page img { width: 100%; border-radius: 8px; margin-bottom: 20px; }
    .page p { font-size: 18px; line-height: 1.6; color: #333; text-align: center; }
    .missing { padding: 80px 20px; text-align: center; color: #999; border: 2px dashed #ddd; border-radius: 8px; margin-bottom: 20px; }
    .title { font-size: 32px; text-align: center; margin-bottom: 40px; color: #2c3e50; }
    @media print { body { background: white; } .page { box-shadow: none; } }
"""


def _render_page(page: StoryPage, source: str) -> str:
    number = page.index + 1
    if source:
        picture = f'<img src="{html.escape(source, quote=True)}" alt="Page {number}">'
    else:
        picture = '<div class="missing">Illustration unavailable</div>'

    return (
        '  <div class="page">\n'
        f"    {picture}\n"
        f"    <p>{html.escape(page.sentence)}</p>\n"
        "  </div>\n"
    )


def render_storybook_html(
    storybook: Storybook,
    title: str = "My Storybook",
    image_sources: Optional[dict[int, str]] = None,
) -> str:
    """
    Render a storybook as HTML.

    Args:
        storybook: Storybook to render
        title: Page and heading title
        image_sources: Optional page index -> image src overrides (e.g. data: URLs)

    Returns:
        HTML document
    """
    image_sources = image_sources or {}
    safe_title = html.escape(title)

    pages = "".join(
        _render_page(page, image_sources.get(page.index, page.image_url))
        for page in storybook.pages
    )

    return (
        "<!DOCTYPE html>\n"
        "<html>\n"
        "<head>\n"
        '  <meta charset="UTF-8">\n'
        f"  <title>{safe_title}</title>\n"
        f"  <style>{STORYBOOK_CSS}  </style>\n"
        "</head>\n"
        "<body>\n"
        f'  <h1 class="title">{safe_title}</h1>\n'
        f"{pages}"
        "</body>\n"
        "</html>\n"
    )


async def fetch_image_data_urls(pages: list[StoryPage]) -> dict[int, str]:
    """
    Download page illustrations and inline them as data: URLs.

    Provider image URLs expire; inlining keeps a downloaded storybook intact.
    Pages that fail to download are left out (their original URL is used).

    Args:
        pages: Storybook pages

    Returns:
        Mapping of page index to data: URL
    """
    sources: dict[int, str] = {}

    async with httpx.AsyncClient(timeout=HTTP_TIMEOUT, follow_redirects=True) as client:
        for page in pages:
            if not page.image_url:
                continue
            try:
                response = await client.get(page.image_url)
                response.raise_for_status()
            except httpx.HTTPError as e:
                logger.warning(f"Could not download illustration for page {page.index + 1}: {e}")
                continue

            mime_type = response.headers.get("content-type", "image/png").split(";")[0]
            encoded = base64.b64encode(response.content).decode("ascii")
            sources[page.index] = f"data:{mime_type};base64,{encoded}"

    return sources


async def save_storybook(
    storybook: Storybook,
    output_dir: Path,
    embed_images: bool = False,
    title: str = "My Storybook",
) -> Path:
    """
    Write the storybook HTML and JSON files.

    Args:
        storybook: Storybook to save
        output_dir: Directory for the files
        embed_images: Inline illustrations as data: URLs
        title: Storybook title

    Returns:
        Path to the HTML file
    """
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    stem = f"storybook-{storybook.created_at.strftime('%Y%m%d-%H%M%S')}"

    image_sources = await fetch_image_data_urls(storybook.pages) if embed_images else None

    html_path = output_dir / f"{stem}.html"
    html_path.write_text(render_storybook_html(storybook, title, image_sources), encoding="utf-8")

    json_path = output_dir / f"{stem}.json"
    json_path.write_text(
        json.dumps(storybook.model_dump(mode="json"), ensure_ascii=False, indent=2),
        encoding="utf-8",
    )

    logger.info(f"Saved storybook: {html_path}")
    return html_path
