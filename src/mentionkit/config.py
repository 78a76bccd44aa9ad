"""Configuration loader for mention.toml."""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

try:
    import tomllib
except ImportError:
    import tomli as tomllib  # type: ignore

DEFAULT_ROUTES = {
    "order": "dashboard/orders",
    "purchase_order": "dashboard/purchase-orders",
}


@dataclass
class ComposeConfig:
    """Composer behaviour."""
    max_suggestions: int = 5
    unicode_words: bool = False


@dataclass
class RosterConfig:
    """Where the candidate roster lives."""
    path: Path = Path("team.yaml")


@dataclass
class NotificationConfig:
    """Mention notification routing."""
    default_route: str = "dashboard/sourcing"
    routes: dict[str, str] = field(default_factory=lambda: dict(DEFAULT_ROUTES))


@dataclass
class ApiConfig:
    """Local JSON API server."""
    host: str = "127.0.0.1"
    port: int = 8766


@dataclass
class MentionConfig:
    """Complete mentionkit configuration."""
    compose: ComposeConfig
    roster: RosterConfig
    notifications: NotificationConfig
    api: ApiConfig


def load_config(config_path: Path | None = None, roster_dir: Path | None = None) -> MentionConfig:
    """
    Load configuration from mention.toml.

    Search order:
    1. config_path (if provided)
    2. cwd/mention.toml
    3. roster_dir/mention.toml

    Args:
        config_path: Explicit path to config file
        roster_dir: Directory holding the roster, for fallback search

    Returns:
        MentionConfig with resolved settings
    """
    toml_data: dict[str, Any] = {}
    found: Path | None = None

    search_paths = []
    if config_path:
        search_paths.append(config_path)
    search_paths.append(Path.cwd() / "mention.toml")
    if roster_dir:
        search_paths.append(roster_dir / "mention.toml")

    for path in search_paths:
        if path.exists():
            with open(path, "rb") as f:
                toml_data = tomllib.load(f)
            found = path
            break

    compose_data = toml_data.get("compose", {})
    compose_config = ComposeConfig(
        max_suggestions=int(compose_data.get("max_suggestions", 5)),
        unicode_words=bool(compose_data.get("unicode_words", False)),
    )

    # Roster path defaults next to roster_dir when one is given
    roster_data = toml_data.get("roster", {})
    default_roster = (roster_dir / "team.yaml") if roster_dir else Path("team.yaml")
    roster_path = default_roster
    if found is not None and "path" in roster_data:
        # Relative to the config file that set it
        roster_path = found.parent / roster_data["path"]
    roster_config = RosterConfig(path=roster_path)

    notif_data = toml_data.get("notifications", {})
    routes = dict(DEFAULT_ROUTES)
    routes.update(notif_data.get("routes", {}))
    notification_config = NotificationConfig(
        default_route=notif_data.get("default_route", "dashboard/sourcing"),
        routes=routes,
    )

    api_data = toml_data.get("api", {})
    api_config = ApiConfig(
        host=api_data.get("host", "127.0.0.1"),
        port=int(api_data.get("port", 8766)),
    )

    return MentionConfig(
        compose=compose_config,
        roster=roster_config,
        notifications=notification_config,
        api=api_config,
    )
