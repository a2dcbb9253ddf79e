"""Application configuration: settings schema and config.yaml loader"""

import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field


CONFIG_FILE = "config.yaml"

DEFAULT_CONTENT_SELECTORS = [
    '[data-testid="post-content"]',
    '.available-content',
    '.post-content',
    '.entry-content',
    'article',
    '.content',
    'main',
]


class Settings(BaseModel):
    app_name:     str = "blogblocks"
    db_url:       str = "sqlite:///blogblocks.db"
    staging_dir:  str = Field(default=".blogblocks/staging", description="Staging directory for converted JSON")
    output_dir:   str = Field(default="dist",   description="Directory for the generated feed")
    html_parser:  str = Field(default="html.parser", description="BeautifulSoup parser feature name")
    content_selectors: list[str] = Field(default_factory=lambda: list(DEFAULT_CONTENT_SELECTORS))
    excerpt_length:     int = Field(default=200, ge=1, description="Max excerpt characters")
    description_length: int = Field(default=300, ge=50, description="Max feed description characters")
    rich_text:    bool = Field(default=True, description="Keep inline formatting in headings, quotes and list items")
    batch_size:   int = Field(default=1, ge=1, description="Documents converted concurrently per update batch")
    batch_delay:  float = Field(default=0.1, ge=0, description="Seconds to wait between update batches")
    apply_partial_matches: bool = Field(default=False, description="Apply keyword-only record matches")
    feed_limit:   int = Field(default=50, ge=1, description="Max posts in the RSS feed")
    site_title:   str = "Brendan's Blog"
    site_description: str = "Thoughts on productivity, technology, and building."
    base_url:     str = "https://blog.brendanbockes.com"
    log_level:    str = Field(default="INFO", pattern="^(TRACE|DEBUG|INFO|SUCCESS|WARNING|ERROR|CRITICAL)$")


def load_config(overrides: dict[str, Any] = None) -> Settings:
    """Load Settings from config.yaml, then BLOGBLOCKS_<FIELD> env vars, then non-None CLI overrides."""
    data: dict[str, Any] = {}
    if Path(CONFIG_FILE).exists():
        try:
            data = yaml.safe_load(Path(CONFIG_FILE).read_text()) or {}
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid {CONFIG_FILE}: {e}") from e
        if not isinstance(data, dict):
            raise ValueError(f"Invalid {CONFIG_FILE}: expected a mapping, got {type(data).__name__}")

    for name, field in Settings.model_fields.items():
        if val := os.getenv(f"BLOGBLOCKS_{name.upper()}"):
            # list settings come from the environment as comma-separated values
            if field.annotation == list[str]:
                val = [v.strip() for v in val.split(",") if v.strip()]
            data[name] = val

    if overrides:
        data.update({k: v for k, v in overrides.items() if v is not None})
    try:
        return Settings(**data)
    except ValueError as e:
        raise ValueError(f"Invalid configuration: {e}") from e
