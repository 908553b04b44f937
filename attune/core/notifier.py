import logging
from typing import Callable

from .classifier import Profile
from .state import ProfileState

logger = logging.getLogger(__name__)

ProfileListener = Callable[[Profile], None]


class ProfileNotifier:
    """Publishes a newly computed profile, at most once per transition."""

    def __init__(self, state: ProfileState, attributes: dict[str, str] | None = None):
        self._state = state
        self._attributes = attributes if attributes is not None else {}
        self._attributes["profile"] = state.applied_profile.value
        self._listeners: list[ProfileListener] = []

    @property
    def applied(self) -> Profile:
        return self._state.applied_profile

    def subscribe(self, listener: ProfileListener) -> None:
        self._listeners.append(listener)

    def publish(self, profile: Profile) -> bool:
        """Apply profile if it differs from the applied one. Returns True on a transition."""
        if profile == self._state.applied_profile:
            return False

        previous = self._state.applied_profile
        self._state.applied_profile = profile
        self._attributes["profile"] = profile.value
        logger.info("Profile changed: %s -> %s", previous.value, profile.value)

        for listener in list(self._listeners):
            try:
                listener(profile)
            except Exception as e:
                logger.error("Profile listener failed: %s", e)
        return True
