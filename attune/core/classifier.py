from enum import Enum
from dataclasses import dataclass
import logging

logger = logging.getLogger(__name__)


class Profile(str, Enum):
    NEUTRAL = "neutral"
    SKIMMER = "skimmer"
    READER = "reader"
    EXPLORER = "explorer"


@dataclass
class ProfileSignals:
    """Aggregated interaction signals for one classification cycle."""
    elapsed_s: float = 0.0
    avg_scroll_speed: float = 0.0   # px/ms, 0 while the window is starved
    scroll_samples: int = 0
    avg_hover_ms: float = 0.0       # 0 while the window is starved
    click_count: int = 0
    interaction_count: int = 0
    primary_dwell_ms: float = 0.0   # committed dwell on the primary content section


class ProfileClassifier:
    """Rule-based heuristic classifier. Rules are evaluated in priority order, first match wins."""

    # Thresholds (tunable)
    WARMUP_S = 3.0                  # below this nothing but neutral
    EXPLORER_INTERACTIONS = 5
    EXPLORER_MIN_ELAPSED_S = 10.0
    SKIMMER_SPEED = 1.5             # px/ms
    SKIMMER_MAX_CLICKS = 3
    SKIMMER_MIN_ELAPSED_S = 5.0
    READER_SPEED = 0.8              # px/ms
    READER_MIN_ELAPSED_S = 15.0
    READER_HOVER_MS = 1500.0
    READER_HOVER_MIN_ELAPSED_S = 10.0
    READER_DWELL_MS = 20000.0

    def classify(self, signals: ProfileSignals) -> Profile:
        """Classify the session from its aggregated signals."""

        if signals.elapsed_s < self.WARMUP_S:
            return Profile.NEUTRAL

        # Deliberate interaction outranks scroll behaviour
        if signals.interaction_count > self.EXPLORER_INTERACTIONS and signals.elapsed_s > self.EXPLORER_MIN_ELAPSED_S:
            logger.debug("Explorer: %d interactions in %.1fs", signals.interaction_count, signals.elapsed_s)
            return Profile.EXPLORER

        if (signals.avg_scroll_speed > self.SKIMMER_SPEED
                and signals.click_count < self.SKIMMER_MAX_CLICKS
                and signals.elapsed_s > self.SKIMMER_MIN_ELAPSED_S):
            logger.debug("Skimmer: avg scroll %.2f px/ms, %d clicks", signals.avg_scroll_speed, signals.click_count)
            return Profile.SKIMMER

        slow_scroll = signals.avg_scroll_speed < self.READER_SPEED or signals.scroll_samples == 0
        if slow_scroll and signals.elapsed_s > self.READER_MIN_ELAPSED_S:
            logger.debug("Reader: avg scroll %.2f px/ms over %.1fs", signals.avg_scroll_speed, signals.elapsed_s)
            return Profile.READER

        if signals.avg_hover_ms > self.READER_HOVER_MS and signals.elapsed_s > self.READER_HOVER_MIN_ELAPSED_S:
            logger.debug("Reader: avg hover %.0fms", signals.avg_hover_ms)
            return Profile.READER

        if signals.primary_dwell_ms > self.READER_DWELL_MS:
            logger.debug("Reader: %.0fms on primary section", signals.primary_dwell_ms)
            return Profile.READER

        return Profile.NEUTRAL
