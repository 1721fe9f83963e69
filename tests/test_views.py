import asyncio
from types import SimpleNamespace
from unittest.mock import AsyncMock

import faq_content
from fakes import FakeMember, make_interaction
from tickets import TopicProgress
from views import FaqView


def _interaction(progress):
    client = SimpleNamespace(controller=SimpleNamespace(acknowledge_topic=AsyncMock(return_value=progress)))
    return make_interaction(FakeMember(42), guild=None, channel=SimpleNamespace(id=5), client=client)


def test_faq_view_has_one_button_per_topic():
    async def runner():
        return [item.custom_id for item in FaqView().children]

    assert asyncio.run(runner()) == ["faq_rules", "faq_requirement", "faq_loadout"]


def test_topic_click_shows_text_and_progress():
    interaction = _interaction(TopicProgress(1, 3))

    async def runner():
        await FaqView().show_topic(interaction, "loadout")

    asyncio.run(runner())
    interaction.edit_original_response.assert_awaited_once_with(content=faq_content.FAQ_TEXT["loadout"])
    assert "1/3" in interaction.followup.send.await_args.args[0]


def test_unlocking_click_sends_no_progress():
    interaction = _interaction(TopicProgress(3, 3, unlocked_now=True))

    async def runner():
        await FaqView().show_topic(interaction, "rules")

    asyncio.run(runner())
    interaction.followup.send.assert_not_awaited()
