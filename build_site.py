#!/usr/bin/env python3
"""
Build the static devotional site from WordPress posts.

Two passes: every post's metadata is derived first (dates, titles,
verses, presentation variants) so prev/next navigation can be linked
across the complete, newest-first set; then pages are rendered by a
fixed-width worker pool. A failure while rendering one page is reported
and the build carries on with the rest.

Usage:
    python build_site.py [--source URL|PATH] [--template PATH] [--output PATH]
                         [--images] [--image-width N] [--download-audio]

Settings default to the DEVO_* environment variables (see config.py).

Produces:
    output/
      2025-12-09.html     - one page per devotional
      2025-12-09.png      - page capture (--images)
      2025-12-09.mp3      - local audio copy (--download-audio)
      devocionales.json   - metadata index, newest first
      index.html          - index page with the catalog embedded
      images/             - banner images copied from the template folder
"""

import argparse
import concurrent.futures
import shutil
import sys
import time
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Callable

import httpx

from build_catalog import (
    CATALOG_FILENAME,
    DocumentMetadata,
    catalog_entries,
    collect_metadata,
    order_catalog,
    write_catalog,
)
from capture_image import capture_article, playwright_available
from config import BuildConfig, ConfigError, load_config
from extract_fields import extract_fields
from fetch_source import SourceError, download_audio, is_url, load_posts, make_client
from generate_index import INDEX_FILENAME, write_index_page
from navigation import NavigationLink, link_neighbors
from render_template import render_template, resolve_globals, template_values
from text_utils import strip_html


class TemplateError(RuntimeError):
    """The page template is missing or unreadable."""


class BuildStage(Enum):
    COLLECTING = 'collecting'
    SORTING = 'sorting'
    RENDERING = 'rendering'
    DONE = 'done'


class DocumentState(Enum):
    PENDING = 'pending'
    EXTRACTING = 'extracting'
    RENDERING_HTML = 'rendering_html'
    CAPTURING_IMAGE = 'capturing_image'
    FETCHING_AUDIO = 'fetching_audio'
    WRITTEN = 'written'
    FAILED = 'failed'


CaptureFn = Callable[[Path, Path, int], Path]


@dataclass
class RenderOutcome:
    date_slug: str
    title: str
    state: DocumentState = DocumentState.PENDING
    failed_at: DocumentState | None = None
    error: str | None = None
    image: Path | None = None
    audio: str | None = None


@dataclass
class BuildReport:
    stage: BuildStage = BuildStage.COLLECTING
    metadata: list[DocumentMetadata] = field(default_factory=list)
    outcomes: list[RenderOutcome] = field(default_factory=list)
    catalog_path: Path | None = None
    index_path: Path | None = None

    @property
    def written(self) -> list[RenderOutcome]:
        return [o for o in self.outcomes if o.state is DocumentState.WRITTEN]

    @property
    def failed(self) -> list[RenderOutcome]:
        return [o for o in self.outcomes if o.state is DocumentState.FAILED]


# ---------------------------------------------------------------------------
# Inputs
# ---------------------------------------------------------------------------

def read_template(path: Path) -> str:
    try:
        return path.read_text(encoding='utf-8')
    except OSError as e:
        raise TemplateError(f"Could not read template {path}: {e}") from e


def copy_images_folder(images_dir: Path, output_dir: Path) -> int:
    """Copy the banner images next to the pages; returns files copied."""
    if not images_dir.is_dir():
        print(f"  Warning: images folder not found at {images_dir}, skipping copy")
        return 0
    destination = output_dir / 'images'
    destination.mkdir(parents=True, exist_ok=True)
    copied = 0
    for src in images_dir.iterdir():
        if src.is_file():
            shutil.copy2(src, destination / src.name)
            copied += 1
    print(f"  Copied {copied} images to {destination}")
    return copied


# ---------------------------------------------------------------------------
# Per-document rendering
# ---------------------------------------------------------------------------

def render_document(
    meta: DocumentMetadata,
    link: NavigationLink,
    template: str,
    config: BuildConfig,
    client: httpx.Client | None = None,
    capture: CaptureFn | None = None,
) -> RenderOutcome:
    """Render, write and post-process one page. Never raises."""
    outcome = RenderOutcome(meta.date_slug, strip_html(meta.display_title))
    try:
        outcome.state = DocumentState.EXTRACTING
        fields = extract_fields(meta.document.body)

        outcome.state = DocumentState.RENDERING_HTML
        page = render_template(template, template_values(meta, fields, link))
        html_path = config.output_dir / meta.file_name
        html_path.write_text(page, encoding='utf-8')

        if config.generate_images:
            outcome.state = DocumentState.CAPTURING_IMAGE
            png_path = config.output_dir / f"{meta.date_slug}.png"
            outcome.image = (capture or capture_article)(html_path, png_path, config.image_width)

        if config.download_audio:
            outcome.state = DocumentState.FETCHING_AUDIO
            audio_name = f"{meta.date_slug}.mp3"
            outcome.audio = download_audio(
                f"{config.audio_server_url}{audio_name}",
                config.output_dir / audio_name,
                client,
            )

        outcome.state = DocumentState.WRITTEN
    except Exception as e:
        outcome.failed_at = outcome.state
        outcome.state = DocumentState.FAILED
        outcome.error = str(e) or type(e).__name__
        print(f'  ERROR "{outcome.title}": {outcome.error}', flush=True)
    return outcome


def _describe(outcome: RenderOutcome) -> str:
    extras = []
    if outcome.image:
        extras.append('png')
    if outcome.audio:
        extras.append(f"audio {outcome.audio}")
    suffix = f" ({', '.join(extras)})" if extras else ''
    return f"  DONE: {outcome.date_slug}.html{suffix}"


def render_all(
    metadata: list[DocumentMetadata],
    links: dict[str, NavigationLink],
    template: str,
    config: BuildConfig,
    client: httpx.Client | None = None,
    capture: CaptureFn | None = None,
) -> list[RenderOutcome]:
    """Render every page with at most `config.workers` in flight.

    Outcomes come back in the order of `metadata`.
    """
    results = {}
    with concurrent.futures.ThreadPoolExecutor(max_workers=config.workers) as executor:
        futures = {
            executor.submit(
                render_document, meta, links[meta.date_slug], template, config, client, capture
            ): meta.date_slug
            for meta in metadata
        }
        for future in concurrent.futures.as_completed(futures):
            outcome = future.result()
            results[futures[future]] = outcome
            if outcome.state is DocumentState.WRITTEN:
                print(_describe(outcome), flush=True)
    return [results[meta.date_slug] for meta in metadata]


# ---------------------------------------------------------------------------
# Site builder
# ---------------------------------------------------------------------------

def build_site(
    config: BuildConfig,
    client: httpx.Client | None = None,
    capture: CaptureFn | None = None,
) -> BuildReport:
    """
    Build the complete static site.

    Steps:
      1. Read the template and load the posts (fatal on failure, nothing written)
      2. Collect metadata for every post
      3. Sort newest first and link prev/next navigation
      4. Render pages in parallel (images and audio when enabled)
      5. Write devocionales.json and index.html
    """
    start_time = time.time()
    report = BuildReport()

    print(f"Data source:       {config.json_source}")
    print(f"Template:          {config.template_path}")
    print(f"Output directory:  {config.output_dir}")
    print(f"Audio server:      {config.audio_server_url}")
    if config.download_audio:
        print("Audio download:    enabled")
    if config.generate_images and capture is None and not playwright_available():
        print("  Warning: Playwright is not installed (pip install playwright); "
              "continuing without images.")
        config = config.with_overrides(generate_images=False)
    if config.generate_images:
        print(f"Image generation:  enabled ({config.image_width}px wide)")
    print()

    owns_client = client is None and (config.download_audio or is_url(config.json_source))
    if owns_client:
        client = make_client()

    try:
        # ------------------------------------------------------------------
        # Step 1: Inputs. Both must succeed before any output is written.
        # ------------------------------------------------------------------
        template = resolve_globals(read_template(config.template_path), config.audio_base_url)
        documents = load_posts(config.json_source, client)
        print(f"  {len(documents)} posts found")
        print()

        config.output_dir.mkdir(parents=True, exist_ok=True)
        copy_images_folder(config.images_dir, config.output_dir)
        print()

        # ------------------------------------------------------------------
        # Step 2: Metadata for every post
        # ------------------------------------------------------------------
        print("=== Collecting metadata ===")
        report.stage = BuildStage.COLLECTING
        collected = collect_metadata(documents)
        print(f"  {len(collected)} records")
        print()

        # ------------------------------------------------------------------
        # Step 3: Order and link
        # ------------------------------------------------------------------
        print("=== Sorting and linking ===")
        report.stage = BuildStage.SORTING
        report.metadata = order_catalog(collected)
        links = link_neighbors(report.metadata)
        if report.metadata:
            print(f"  Newest: {report.metadata[0].date_slug}")
            print(f"  Oldest: {report.metadata[-1].date_slug}")
        print()

        # ------------------------------------------------------------------
        # Step 4: Pages
        # ------------------------------------------------------------------
        print(f"=== Rendering pages ({config.workers} workers) ===")
        report.stage = BuildStage.RENDERING
        report.outcomes = render_all(report.metadata, links, template, config, client, capture)
        print()
    finally:
        if owns_client:
            client.close()

    # ------------------------------------------------------------------
    # Step 5: Catalog and index page
    # ------------------------------------------------------------------
    print("=== Writing index ===")
    report.catalog_path = write_catalog(report.metadata, config.output_dir / CATALOG_FILENAME)
    print(f"  Written: {CATALOG_FILENAME}")
    report.index_path = write_index_page(
        config.index_template_path,
        catalog_entries(report.metadata),
        config.output_dir / INDEX_FILENAME,
    )
    if report.index_path:
        print(f"  Written: {INDEX_FILENAME}")
    else:
        print(f"  No index template at {config.index_template_path}, skipping {INDEX_FILENAME}")
    report.stage = BuildStage.DONE

    # ------------------------------------------------------------------
    # Summary
    # ------------------------------------------------------------------
    elapsed = time.time() - start_time
    images = sum(1 for o in report.outcomes if o.image)
    audio = sum(1 for o in report.outcomes if o.audio == 'downloaded')
    print()
    print("=" * 50)
    print(f"  Build complete in {elapsed:.1f}s")
    print(f"  {len(report.written)} pages written, {len(report.failed)} failed")
    if config.generate_images:
        print(f"  {images} images")
    if config.download_audio:
        print(f"  {audio} audio files downloaded")
    print(f"  Output: {config.output_dir.resolve()}")
    print("=" * 50)

    return report


# ---------------------------------------------------------------------------
# CLI entry point
# ---------------------------------------------------------------------------

def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description='Build static devotional pages from WordPress posts.',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    python build_site.py
    python build_site.py --source posts.json --output ./site
    python build_site.py --images --image-width 1080
    DEVO_DOWNLOAD_AUDIO=true python build_site.py
        """,
    )
    parser.add_argument('--source', default=None,
                        help='Posts endpoint URL or local JSON file (DEVO_JSON_SOURCE)')
    parser.add_argument('--template', type=Path, default=None,
                        help='Page template with {{placeholders}} (DEVO_TEMPLATE_PATH)')
    parser.add_argument('--index-template', type=Path, default=None,
                        help='Index page template (DEVO_INDEX_TEMPLATE_PATH)')
    parser.add_argument('--output', type=Path, default=None,
                        help='Output directory (DEVO_OUTPUT_DIR)')
    parser.add_argument('--images', action='store_true', default=None,
                        help='Capture a PNG of each page (DEVO_GENERATE_IMAGES)')
    parser.add_argument('--image-width', type=int, default=None,
                        help='Capture viewport width (DEVO_IMAGE_WIDTH)')
    parser.add_argument('--audio-url', default=None,
                        help='Audio server base URL (DEVO_AUDIO_SERVER_URL)')
    parser.add_argument('--download-audio', action='store_true', default=None,
                        help='Download each MP3 next to its page (DEVO_DOWNLOAD_AUDIO)')
    parser.add_argument('--workers', type=int, default=None,
                        help='Pages rendered at the same time (DEVO_WORKERS)')
    return parser.parse_args(argv)


def config_from_args(args: argparse.Namespace, environ=None) -> BuildConfig:
    return load_config(environ).with_overrides(
        json_source=args.source,
        template_path=args.template,
        index_template_path=args.index_template,
        output_dir=args.output,
        generate_images=args.images,
        image_width=args.image_width,
        audio_server_url=args.audio_url,
        download_audio=args.download_audio,
        workers=args.workers,
    )


def main(argv: list[str] | None = None):
    args = parse_args(argv)
    try:
        config = config_from_args(args)
        if config.workers < 1 or config.image_width < 1:
            raise ConfigError("--workers and --image-width must be positive")
        build_site(config)
    except (ConfigError, TemplateError, SourceError) as e:
        print(f"Error: {e}")
        sys.exit(1)
    except Exception as e:
        print(f"Error: build failed: {type(e).__name__}: {e}")
        sys.exit(1)


if __name__ == '__main__':
    main()
