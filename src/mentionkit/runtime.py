"""Runtime wiring helper for CLI and API applications."""

from dataclasses import dataclass
from pathlib import Path

from .adapters.html_renderer import HtmlRenderer
from .adapters.yaml_roster import YamlRoster
from .compose.session import ComposeOptions
from .config import MentionConfig, load_config
from .core.ports import CandidateSource


@dataclass
class Runtime:
    """Container for all wired components."""
    config: MentionConfig
    roster: CandidateSource
    renderer: HtmlRenderer

    @property
    def options(self) -> ComposeOptions:
        return ComposeOptions(
            max_suggestions=self.config.compose.max_suggestions,
            unicode_words=self.config.compose.unicode_words,
        )


def build_runtime(
    config_path: Path | None = None,
    roster_path: Path | None = None,
) -> Runtime:
    """Build and wire all components."""
    config = load_config(
        config_path=config_path,
        roster_dir=roster_path.parent if roster_path else None,
    )

    # CLI arg wins over config
    if roster_path is None:
        roster_path = config.roster.path

    return Runtime(
        config=config,
        roster=YamlRoster(roster_path),
        renderer=HtmlRenderer(),
    )
