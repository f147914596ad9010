"""Views configuration.

ViewsConfig is a frozen dataclass — immutable after creation, built once
by the host application and handed to ``Views.from_config()``.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from roost.buffers import DEFAULT_MAX_RETAINED, DEFAULT_POOL_SIZE


@dataclass(frozen=True, slots=True)
class ViewsConfig:
    """View tree configuration. Immutable after creation.

    All fields have sensible defaults. Override what you need::

        config = ViewsConfig(view_dir="app/views", search_paths=("", "plugins/blog"))
    """

    # View tree
    view_dir: str | Path = "views"
    search_paths: tuple[str, ...] = ()  # First listed wins; () ≡ ("",)

    # Template engine
    missing_key: str = "zero"  # "zero", "error" or "invalid"
    autoescape: bool = True

    # Values exposed to every template (request variables take precedence)
    helpers: dict[str, Any] = field(default_factory=dict)

    # Scratch buffers for layout rendering
    buffer_pool_size: int = DEFAULT_POOL_SIZE
    max_buffer_size: int = DEFAULT_MAX_RETAINED  # Characters; larger buffers aren't pooled
