"""Source configuration — which upstreams to poll, in what order, with which adapter."""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

import yaml

from newsfeed.models.article import SourceName

# Ceiling on entries/items considered per source per run
DEFAULT_MAX_ITEMS = 30


class AdapterKind(str, Enum):
    """Shape of an upstream, which decides the adapter that reads it."""

    FEED = "feed"
    TREE_API = "tree_api"


class SourceConfigError(ValueError):
    """sources.yaml names an unknown source or adapter kind."""

    pass


@dataclass
class SourceConfig:
    """One configured upstream."""

    name: SourceName
    kind: AdapterKind
    url: str
    enabled: bool = True
    max_items: int = DEFAULT_MAX_ITEMS
    categories: list[str] = field(default_factory=list)


def _default_sources_path() -> Path:
    project_root = Path(__file__).parent.parent.parent.parent
    return project_root / "config" / "sources.yaml"


def _parse_source(raw: dict, default_max_items: int = DEFAULT_MAX_ITEMS) -> SourceConfig:
    try:
        name = SourceName(raw["name"])
    except (KeyError, ValueError) as e:
        raise SourceConfigError(f"Unknown source name: {raw.get('name')!r}") from e
    try:
        kind = AdapterKind(raw["kind"])
    except (KeyError, ValueError) as e:
        raise SourceConfigError(
            f"Unknown adapter kind for {name.value}: {raw.get('kind')!r}"
        ) from e
    if not raw.get("url"):
        raise SourceConfigError(f"Source {name.value} has no url")

    return SourceConfig(
        name=name,
        kind=kind,
        url=raw["url"],
        enabled=bool(raw.get("enabled", True)),
        max_items=int(raw.get("max_items", default_max_items)),
        categories=list(raw.get("categories") or []),
    )


def load_sources(
    config_path: str | None = None,
    default_max_items: int = DEFAULT_MAX_ITEMS,
) -> list[SourceConfig]:
    """Load sources from config/sources.yaml, preserving file order.

    Args:
        config_path: Optional path to sources.yaml. Defaults to config/sources.yaml.
        default_max_items: Cap for sources that do not set max_items.

    Returns:
        List of source configurations (disabled ones included).

    Raises:
        FileNotFoundError: If the sources file doesn't exist.
        yaml.YAMLError: If the YAML is malformed.
        SourceConfigError: If a source names an unknown source or kind.
    """
    path = Path(config_path) if config_path else _default_sources_path()

    with open(path) as f:
        data = yaml.safe_load(f) or {}

    return [_parse_source(raw, default_max_items) for raw in data.get("sources", [])]
