"""
Rasterize the <article class="devocional"> region of a rendered page.

Uses Playwright's Chromium. Elements with class "no-screenshot" (download
button, navigation) are hidden before the capture. Playwright is an
optional dependency: install with `pip install -e .[images]` and
`playwright install chromium`.
"""

import importlib.util
from pathlib import Path


ARTICLE_SELECTOR = 'article.devocional'
VIEWPORT_HEIGHT = 1080
HIDE_NO_SCREENSHOT_JS = (
    "() => document.querySelectorAll('.no-screenshot')"
    ".forEach(el => { el.style.display = 'none'; })"
)


def playwright_available() -> bool:
    return importlib.util.find_spec('playwright') is not None


def capture_article(html_path: Path, png_path: Path, width: int = 1920) -> Path:
    """Screenshot the article element of `html_path` into `png_path`.

    The page is loaded from its file URL so relative assets resolve.
    """
    from playwright.sync_api import sync_playwright

    with sync_playwright() as p:
        browser = p.chromium.launch(args=['--no-sandbox', '--disable-setuid-sandbox'])
        try:
            page = browser.new_page(
                viewport={'width': width, 'height': VIEWPORT_HEIGHT},
                device_scale_factor=1,
            )
            page.goto(html_path.resolve().as_uri(), wait_until='networkidle')
            page.wait_for_selector(ARTICLE_SELECTOR)
            page.evaluate(HIDE_NO_SCREENSHOT_JS)
            page.locator(ARTICLE_SELECTOR).first.screenshot(path=str(png_path), type='png')
        finally:
            browser.close()
    return png_path
