# -*- coding: utf-8 -*-
import logging
from typing import NamedTuple, Optional

logger = logging.getLogger(__name__)

# FAQ topics a requester must open before chat unlocks
TOPICS = ("rules", "requirement", "loadout")


class Stage(NamedTuple):
    key: str
    prompt: str


REGION = Stage(
    "region",
    "🌍 **One more thing!** Please type your **region** (e.g. `EU`, `NA`, `ASIA`) in this chat.",
)
SCREENSHOT = Stage(
    "screenshot",
    "📸 **Almost done!** Please upload a **screenshot of your profile stats** to finish verification.",
)

KNOWN_STAGES = {stage.key: stage for stage in (REGION, SCREENSHOT)}


def build_stages(keys) -> list[Stage]:
    """Maps configured stage keys to descriptors, keeping order and skipping unknown ones."""
    stages = []
    for key in keys:
        stage = KNOWN_STAGES.get(key)
        if stage is None:
            logger.warning("Unknown onboarding stage %r skipped.", key)
            continue
        if stage not in stages:
            stages.append(stage)
    return stages


class OnboardingTracker:
    """Transient per-channel onboarding state. Nothing here is persisted."""

    def __init__(self, stages=(REGION, SCREENSHOT), topics=TOPICS):
        self.stages = list(stages)
        self.topics = tuple(topics)
        self.progress: dict[int, set[str]] = {}
        self.unlocked: set[int] = set()
        self.pending: dict[int, str] = {}
        self.regions: dict[int, str] = {}

    @property
    def total(self):
        return len(self.topics)

    def acknowledge(self, channel_id, topic) -> int:
        """Adds ``topic`` to the channel's progress and returns the new count."""
        if topic not in self.topics:
            raise ValueError(f"Unknown onboarding topic: {topic!r}")
        done = self.progress.setdefault(channel_id, set())
        done.add(topic)
        return len(done)

    def is_unlocked(self, channel_id):
        return channel_id in self.unlocked

    def mark_unlocked(self, channel_id):
        self.unlocked.add(channel_id)
        self.progress.pop(channel_id, None)

    def pending_stage(self, channel_id) -> Optional[str]:
        return self.pending.get(channel_id)

    def begin_stages(self, channel_id) -> Optional[Stage]:
        """Enters the first configured stage; None means the ticket is fully open."""
        return self._enter(channel_id, 0)

    def advance(self, channel_id) -> Optional[Stage]:
        """Completes the pending stage and enters the next one, if any."""
        current = self.pending.get(channel_id)
        keys = [stage.key for stage in self.stages]
        if current not in keys:
            return None
        return self._enter(channel_id, keys.index(current) + 1)

    def _enter(self, channel_id, index):
        if index >= len(self.stages):
            self.pending.pop(channel_id, None)
            return None
        stage = self.stages[index]
        self.pending[channel_id] = stage.key
        return stage

    def set_region(self, channel_id, region):
        self.regions[channel_id] = region

    def pop_region(self, channel_id):
        return self.regions.pop(channel_id, None)

    def forget(self, channel_id):
        self.progress.pop(channel_id, None)
        self.unlocked.discard(channel_id)
        self.pending.pop(channel_id, None)
        self.regions.pop(channel_id, None)
