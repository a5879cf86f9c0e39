"""Configuration management with Pydantic models."""

import os
import tomllib
from enum import Enum
from pathlib import Path

from dotenv import load_dotenv
from pydantic import BaseModel, Field

# Project root: src/sitemap_to_md/config.py -> ../../.env
ENV_PATH = Path(__file__).resolve().parents[2] / ".env"


class Engine(str, Enum):
    """Strategy used to retrieve and convert a page."""

    FETCH = "fetch"
    JINA = "jina"
    FIRECRAWL = "firecrawl"


class TitleType(str, Enum):
    """Where output filenames come from."""

    PAGE = "page"
    URL = "url"


class JinaResponseFormat(str, Enum):
    """Response shape requested from the Jina Reader endpoint."""

    TEXT = "text"
    JSON = "json"


class NamingPolicy(BaseModel):
    """How a fetched page is turned into a base filename."""

    title_type: TitleType = TitleType.PAGE
    numeric_prefix: bool = False


class FilterPatterns(BaseModel):
    """Substring patterns applied to the discovered URLs."""

    include: list[str] = Field(default_factory=list)
    exclude: list[str] = Field(default_factory=list)


class HttpConfig(BaseModel):
    """Configuration for plain HTTP requests."""

    timeout_seconds: float = Field(default=30.0, gt=0, le=600)
    max_redirects: int = Field(default=10, ge=0, le=50)
    user_agent: str = "SitemapToMd/0.1 (+https://github.com/sitemap-to-md)"


class EngineConfig(BaseModel):
    """Configuration for the fetch engine selected for a run."""

    engine: Engine = Engine.FETCH
    target_selector: str | None = None
    remove_selector: str | None = None
    jina_api_key: str | None = None
    jina_endpoint: str = "https://r.jina.ai"
    jina_response_format: JinaResponseFormat = JinaResponseFormat.TEXT
    firecrawl_api_key: str | None = None
    firecrawl_api_url: str | None = None


class BatchConfig(BaseModel):
    """Configuration for batch scheduling."""

    batch_size: int = Field(default=50, ge=1, le=500)
    delay_seconds: float = Field(default=0.05, ge=0.0, le=60.0)
    firecrawl_max_calls: int = Field(default=100, ge=1)
    firecrawl_period_seconds: float = Field(default=60.0, gt=0)


class AppConfig(BaseModel):
    """Main application configuration for a markdown run."""

    input: str
    output_dir: Path = Path("./output")
    filters: FilterPatterns = Field(default_factory=FilterPatterns)
    naming: NamingPolicy = Field(default_factory=NamingPolicy)
    http: HttpConfig = Field(default_factory=HttpConfig)
    engine: EngineConfig = Field(default_factory=EngineConfig)
    batch: BatchConfig = Field(default_factory=BatchConfig)
    verbose: bool = False

    @classmethod
    def from_toml(cls, path: Path, overrides: dict | None = None) -> "AppConfig":
        """Load config from a TOML file; ``overrides`` win over file values."""
        with open(path, "rb") as f:
            data = tomllib.load(f)
        return cls.model_validate(merge_settings(data, overrides or {}))


def load_env(path: Path = ENV_PATH) -> None:
    """Load API keys from a ``.env`` file without clobbering the real environment."""
    load_dotenv(path, override=False)


def api_key_from_env(engine: Engine) -> str | None:
    """Return the API key configured for a hosted engine, if any."""
    if engine == Engine.JINA:
        return os.environ.get("JINA_API_KEY") or None
    if engine == Engine.FIRECRAWL:
        return os.environ.get("FIRECRAWL_API_KEY") or None
    return None


def merge_settings(base: dict, updates: dict) -> dict:
    """Recursively merge ``updates`` into a copy of ``base``."""
    merged = dict(base)
    for key, value in updates.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = merge_settings(merged[key], value)
        else:
            merged[key] = value
    return merged
