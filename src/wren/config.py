"""Application configuration.

One frozen dataclass holds every setting the app reads at freeze time.
Pass it to ``App(config=...)``; there is no global settings object.
"""

from dataclasses import dataclass
from pathlib import Path

from wren.errors import ConfigurationError

LOG_LEVELS = frozenset({"debug", "info", "warning", "error", "critical"})


@dataclass(frozen=True, slots=True)
class AppConfig:
    """Settings for one wren App. Immutable after creation.

    Every field has a default, so override only what differs::

        config = AppConfig(template_dir="views", static_dir=None, debug=True)

    Raises ``ConfigurationError`` for values that could never work
    (a port outside 0-65535, a non-positive body limit, an unknown log level).
    """

    # Server
    host: str = "127.0.0.1"
    port: int = 8000
    debug: bool = False  # detailed 500 bodies, template auto-reload, server reload

    # Server reload, used only when debug is on
    reload_include: tuple[str, ...] = ()  # extra file extensions
    reload_dirs: tuple[str, ...] = ()  # extra directories besides cwd

    # Views
    template_dir: str | Path = "templates"
    cache_templates: bool = True
    trim_blocks: bool = True
    lstrip_blocks: bool = True

    # Static fallback; None turns it off
    static_dir: str | Path | None = "static"
    static_index: str = "index.html"
    static_cache_control: str = "public, max-age=3600"

    # Request bodies larger than this are answered with 413
    max_content_length: int = 16 * 1024 * 1024

    # Level for the ``wren`` logger when started from the CLI
    log_level: str = "info"

    def __post_init__(self) -> None:
        if not 0 <= self.port <= 65535:
            msg = f"port must be between 0 and 65535, got {self.port}"
            raise ConfigurationError(msg)
        if self.max_content_length <= 0:
            msg = f"max_content_length must be positive, got {self.max_content_length}"
            raise ConfigurationError(msg)
        if self.log_level.lower() not in LOG_LEVELS:
            msg = f"log_level must be one of {sorted(LOG_LEVELS)}, got {self.log_level!r}"
            raise ConfigurationError(msg)
