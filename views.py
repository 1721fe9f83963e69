# -*- coding: utf-8 -*-
import logging

import discord
from discord.ui import View

import faq_content

logger = logging.getLogger(__name__)


# =============================
# CREATE TICKET BUTTON VIEW
# =============================
class TicketPanelView(View):
    def __init__(self):
        super().__init__(timeout=None)

    @discord.ui.button(
        label="Create Ticket",
        style=discord.ButtonStyle.secondary,
        emoji="📩",
        custom_id="create_ticket",
    )
    async def create_ticket(self, interaction: discord.Interaction, button: discord.ui.Button):
        try:
            await interaction.client.controller.create_ticket(interaction)
        except discord.HTTPException as e:
            logger.error("Error in ticket creation button: %s", e)
            if not interaction.response.is_done():
                await interaction.response.send_message(
                    "❌ An unexpected error occurred while processing your ticket request. "
                    "Please notify an administrator.",
                    ephemeral=True,
                )


# =============================
# FAQ BUTTONS VIEW
# =============================
class FaqView(View):
    """One button per onboarding topic; each click counts toward unlocking chat."""

    def __init__(self):
        super().__init__(timeout=None)
        for topic, custom_id, label in faq_content.FAQ_BUTTONS:
            button = discord.ui.Button(label=label, style=discord.ButtonStyle.secondary, custom_id=custom_id)
            button.callback = self._make_callback(topic)
            self.add_item(button)

    def _make_callback(self, topic):
        async def callback(interaction: discord.Interaction):
            await self.show_topic(interaction, topic)
        return callback

    async def show_topic(self, interaction: discord.Interaction, topic: str):
        await interaction.response.defer(ephemeral=True)
        await interaction.edit_original_response(content=faq_content.FAQ_TEXT[topic])

        progress = await interaction.client.controller.acknowledge_topic(interaction.channel, topic)
        if progress is None or progress.unlocked_now or progress.remaining == 0:
            return
        try:
            await interaction.followup.send(
                f"📖 Progress: **{progress.count}/{progress.total}** read. "
                f"{progress.remaining} remaining to unlock the chat.",
                ephemeral=True,
            )
        except discord.HTTPException as e:
            logger.warning("Failed to send progress notice: %s", e)
