"""Tests for profile change publication."""

import pytest
from attune.core.classifier import Profile
from attune.core.notifier import ProfileNotifier
from attune.core.state import ProfileState


@pytest.fixture
def state():
    return ProfileState(session_start=0.0)


@pytest.fixture
def attributes():
    return {}


@pytest.fixture
def notifier(state, attributes):
    return ProfileNotifier(state, attributes)


class TestProfileNotifier:
    def test_initial_publication_is_neutral(self, notifier, attributes):
        assert notifier.applied == Profile.NEUTRAL
        assert attributes["profile"] == "neutral"

    def test_same_profile_twice_notifies_once(self, notifier):
        seen = []
        notifier.subscribe(seen.append)
        assert notifier.publish(Profile.READER) is True
        assert notifier.publish(Profile.READER) is False
        assert seen == [Profile.READER]

    def test_unchanged_neutral_is_a_no_op(self, notifier, attributes):
        seen = []
        notifier.subscribe(seen.append)
        assert notifier.publish(Profile.NEUTRAL) is False
        assert seen == []
        assert attributes == {"profile": "neutral"}

    def test_change_updates_state_and_attribute(self, notifier, state, attributes):
        notifier.publish(Profile.SKIMMER)
        assert state.applied_profile == Profile.SKIMMER
        assert attributes["profile"] == "skimmer"

    def test_every_transition_is_delivered(self, notifier):
        seen = []
        notifier.subscribe(seen.append)
        for profile in (Profile.SKIMMER, Profile.SKIMMER, Profile.EXPLORER, Profile.NEUTRAL, Profile.NEUTRAL):
            notifier.publish(profile)
        assert seen == [Profile.SKIMMER, Profile.EXPLORER, Profile.NEUTRAL]

    def test_failing_listener_does_not_stop_others(self, notifier, state):
        seen = []

        def broken(profile):
            raise RuntimeError("consumer bug")

        notifier.subscribe(broken)
        notifier.subscribe(seen.append)
        assert notifier.publish(Profile.EXPLORER) is True
        assert seen == [Profile.EXPLORER]
        assert state.applied_profile == Profile.EXPLORER
