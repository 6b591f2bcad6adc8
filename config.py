"""
Build configuration, read once from DEVO_* environment variables.

    DEVO_JSON_SOURCE          API URL or local JSON path
    DEVO_TEMPLATE_PATH        page template with {{placeholders}}
    DEVO_INDEX_TEMPLATE_PATH  optional index page template
    DEVO_OUTPUT_DIR           output directory
    DEVO_GENERATE_IMAGES      true/false, PNG capture of article.devocional
    DEVO_IMAGE_WIDTH          viewport width for the capture
    DEVO_AUDIO_SERVER_URL     base URL of the MP3 files
    DEVO_DOWNLOAD_AUDIO       true/false, copy MP3s next to the pages
    DEVO_WORKERS              documents rendered at the same time
"""

import os
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Mapping


DEFAULT_JSON_SOURCE = 'https://cenfolic.com/wordpress/wp-json/wp/v2/posts'
DEFAULT_AUDIO_SERVER_URL = 'https://cenfolic.com/audio/devo/'
DEFAULT_TEMPLATE = 'devocional-template_placeholders.html'
DEFAULT_INDEX_TEMPLATE = 'index-template.html'
DEFAULT_OUTPUT_DIR = 'output'
DEFAULT_IMAGE_WIDTH = 1920
DEFAULT_WORKERS = 4


class ConfigError(ValueError):
    """Invalid configuration value."""


@dataclass(frozen=True)
class BuildConfig:
    json_source: str = DEFAULT_JSON_SOURCE
    template_path: Path = Path(DEFAULT_TEMPLATE)
    index_template_path: Path = Path(DEFAULT_INDEX_TEMPLATE)
    output_dir: Path = Path(DEFAULT_OUTPUT_DIR)
    generate_images: bool = False
    image_width: int = DEFAULT_IMAGE_WIDTH
    audio_server_url: str = DEFAULT_AUDIO_SERVER_URL
    download_audio: bool = False
    workers: int = DEFAULT_WORKERS

    @property
    def images_dir(self) -> Path:
        """Banner images shipped next to the template."""
        return self.template_path.parent / 'images'

    @property
    def audio_base_url(self) -> str:
        """Value of {{audio_server_url}}: local copies or the remote server."""
        return './' if self.download_audio else self.audio_server_url

    def with_overrides(self, **changes) -> 'BuildConfig':
        """Copy with the non-None values of `changes` applied."""
        return replace(self, **{k: v for k, v in changes.items() if v is not None})


def _flag(value: str | None) -> bool:
    return (value or '').strip().lower() == 'true'


def _positive_int(name: str, value: str | None, default: int) -> int:
    if value is None or not value.strip():
        return default
    try:
        number = int(value)
    except ValueError:
        raise ConfigError(f"{name} must be an integer, got {value!r}") from None
    if number < 1:
        raise ConfigError(f"{name} must be positive, got {number}")
    return number


def load_config(environ: Mapping[str, str] | None = None) -> BuildConfig:
    """Build the configuration from the environment (os.environ by default)."""
    env = os.environ if environ is None else environ
    return BuildConfig(
        json_source=env.get('DEVO_JSON_SOURCE') or DEFAULT_JSON_SOURCE,
        template_path=Path(env.get('DEVO_TEMPLATE_PATH') or DEFAULT_TEMPLATE),
        index_template_path=Path(env.get('DEVO_INDEX_TEMPLATE_PATH') or DEFAULT_INDEX_TEMPLATE),
        output_dir=Path(env.get('DEVO_OUTPUT_DIR') or DEFAULT_OUTPUT_DIR),
        generate_images=_flag(env.get('DEVO_GENERATE_IMAGES')),
        image_width=_positive_int('DEVO_IMAGE_WIDTH', env.get('DEVO_IMAGE_WIDTH'), DEFAULT_IMAGE_WIDTH),
        audio_server_url=env.get('DEVO_AUDIO_SERVER_URL') or DEFAULT_AUDIO_SERVER_URL,
        download_audio=_flag(env.get('DEVO_DOWNLOAD_AUDIO')),
        workers=_positive_int('DEVO_WORKERS', env.get('DEVO_WORKERS'), DEFAULT_WORKERS),
    )
