"""Shared fixtures for the ticket tests."""

from __future__ import annotations

import pytest

from config import BotConfig
from fakes import CLOSE_ROLE, MOD_ROLE, FakeBot, FakeClock, FakeGuild
from onboarding import OnboardingTracker
from storage import JsonStore
from tickets import TicketController


@pytest.fixture
def guild():
    return FakeGuild()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def make_controller(tmp_path, guild, clock):
    def _make(**options):
        options.setdefault("mod_role_id", MOD_ROLE)
        options.setdefault("close_role_ids", [CLOSE_ROLE])
        options.setdefault("close_delay_seconds", 0)
        stages = options.pop("stages", None)
        config = BotConfig("token", **options)
        tracker = OnboardingTracker() if stages is None else OnboardingTracker(stages=stages)
        return TicketController(
            FakeBot(guild),
            config,
            JsonStore(str(tmp_path / "tickets.json")).load(),
            JsonStore(str(tmp_path / "cooldowns.json")).load(),
            tracker,
            clock=clock,
        )
    return _make


@pytest.fixture
def controller(make_controller):
    return make_controller()
