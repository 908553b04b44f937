import logging

from ..core.classifier import Profile
from ..runtime.engine import ProfilerEngine

logger = logging.getLogger(__name__)


class DetailPanels:
    """Expandable "internals" panels that react to the published profile.

    Opening or closing a panel by hand counts as deliberate engagement; a reader
    profile reveals every panel.
    """

    TOGGLE_BOOST = 3

    def __init__(self, engine: ProfilerEngine, panel_ids):
        self._engine = engine
        self._revealed: dict[str, bool] = {panel_id: False for panel_id in panel_ids}
        engine.on_profile_change(self._on_profile_change)

    def toggle(self, panel_id: str) -> bool:
        """Flip a panel and return its new revealed flag. Raises KeyError for unknown panels."""
        revealed = not self._revealed[panel_id]
        self._revealed[panel_id] = revealed
        self._engine.boost(self.TOGGLE_BOOST)
        return revealed

    def is_revealed(self, panel_id: str) -> bool:
        return self._revealed.get(panel_id, False)

    def snapshot(self) -> dict[str, bool]:
        return dict(self._revealed)

    def _on_profile_change(self, profile: Profile) -> None:
        if profile == Profile.READER:
            for panel_id in self._revealed:
                self._revealed[panel_id] = True
            logger.info("Reader profile: revealed %d panels", len(self._revealed))


def indicator_text(profile: Profile) -> str:
    """HUD label for the applied profile; empty while neutral."""
    return "" if profile == Profile.NEUTRAL else f"mode: {profile.value}"


def format_uptime(seconds: float) -> str:
    s = max(0, int(seconds))
    return f"{s // 60:02d}:{s % 60:02d}"
