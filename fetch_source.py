"""
Load WordPress posts and download episode audio.

The source is either a REST endpoint (anything starting with http:// or
https://) or a local JSON file holding the same array of posts.
"""

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import httpx


DEFAULT_TIMEOUT = 30.0
USER_AGENT = 'devocionales-site-builder/1.0'


class SourceError(RuntimeError):
    """The post source could not be read or does not hold a post array."""


@dataclass(frozen=True)
class SourceDocument:
    id: Any
    date: str
    link: str
    slug: str
    title: str
    body: str


def is_url(source: str) -> bool:
    return source.startswith('http://') or source.startswith('https://')


def make_client(timeout: float = DEFAULT_TIMEOUT) -> httpx.Client:
    return httpx.Client(
        timeout=timeout,
        follow_redirects=True,
        headers={'User-Agent': USER_AGENT},
    )


def fetch_json(source: str, client: httpx.Client | None = None) -> Any:
    """Fetch and decode JSON from a URL or a local path."""
    if is_url(source):
        print(f"Fetching posts from: {source}", flush=True)
        owns_client = client is None
        client = client or make_client()
        try:
            response = client.get(source)
            response.raise_for_status()
            return response.json()
        except httpx.HTTPError as e:
            raise SourceError(f"Could not fetch {source}: {e}") from e
        except ValueError as e:
            raise SourceError(f"Invalid JSON from {source}: {e}") from e
        finally:
            if owns_client:
                client.close()

    print(f"Reading local file: {source}", flush=True)
    try:
        return json.loads(Path(source).read_text(encoding='utf-8'))
    except OSError as e:
        raise SourceError(f"Could not read {source}: {e}") from e
    except ValueError as e:
        raise SourceError(f"Invalid JSON in {source}: {e}") from e


def _rendered(post: dict, key: str) -> str:
    value = post.get(key)
    if isinstance(value, dict):
        value = value.get('rendered')
    if value is None:
        raise KeyError(key)
    return str(value)


def parse_post(post: dict) -> SourceDocument:
    """Build a SourceDocument from one WordPress REST record."""
    if not isinstance(post, dict):
        raise SourceError(f"Expected a post object, got {type(post).__name__}")
    try:
        return SourceDocument(
            id=post.get('id'),
            date=str(post['date']),
            link=str(post.get('link') or ''),
            slug=str(post.get('slug') or ''),
            title=_rendered(post, 'title'),
            body=_rendered(post, 'content'),
        )
    except KeyError as e:
        raise SourceError(f"Post {post.get('id', '?')} is missing field {e}") from e


def load_posts(source: str, client: httpx.Client | None = None) -> list[SourceDocument]:
    data = fetch_json(source, client)
    if not isinstance(data, list):
        raise SourceError(f"Expected a JSON array of posts from {source}")
    return [parse_post(post) for post in data]


# ---------------------------------------------------------------------------
# Audio
# ---------------------------------------------------------------------------

AUDIO_DOWNLOADED = 'downloaded'
AUDIO_SKIPPED = 'skipped'
AUDIO_MISSING = 'missing'


def download_audio(url: str, dest: Path, client: httpx.Client) -> str:
    """Download `url` to `dest` unless `dest` already exists.

    Returns AUDIO_SKIPPED when the file is already there (nothing is
    requested), AUDIO_MISSING on a 404, AUDIO_DOWNLOADED otherwise. Other
    HTTP errors raise. A partial file never replaces `dest`.
    """
    if dest.exists():
        return AUDIO_SKIPPED

    partial = dest.with_name(dest.name + '.part')
    with client.stream('GET', url) as response:
        if response.status_code == 404:
            return AUDIO_MISSING
        response.raise_for_status()
        try:
            with open(partial, 'wb') as f:
                for chunk in response.iter_bytes():
                    f.write(chunk)
        except BaseException:
            partial.unlink(missing_ok=True)
            raise
    partial.replace(dest)
    return AUDIO_DOWNLOADED
