# -*- coding: utf-8 -*-
import logging
import os
import re
from typing import Optional

import discord
from discord import app_commands
from discord.ext import commands, tasks

import faq_content
from config import BotConfig
from keep_alive import keep_alive
from onboarding import OnboardingTracker, build_stages
from storage import JsonStore
from tickets import TicketController
from views import FaqView, TicketPanelView

logger = logging.getLogger(__name__)

# Hidden owner-only prefix command
RESET_COMMAND = "!resetcooldown"
RESET_REPLY_DELETE_AFTER = 5

USER_MENTION_RE = re.compile(r"^<@!?(\d+)>$")


# ---------------------------
# GLOBAL HELPER: Utility Functions
# ---------------------------
def parse_user_id(arg: str) -> Optional[int]:
    """Accepts a raw id or a <@id> / <@!id> mention."""
    arg = arg.strip()
    match = USER_MENTION_RE.match(arg)
    if match:
        return int(match.group(1))
    if arg.isdigit():
        return int(arg)
    return None


def is_reset_command(content: str) -> bool:
    """True when the first word is exactly the reset command."""
    return content.split(maxsplit=1)[:1] == [RESET_COMMAND]


def welcome_message(member, config: BotConfig) -> str:
    text = f"👋 Welcome {member.mention} to **{member.guild.name}**!"
    if config.rules_channel_id:
        text += f"\n📜 Please read the rules in <#{config.rules_channel_id}>."
    if config.giveaway_channel_id:
        text += f"\n🎁 Don't miss our giveaways in <#{config.giveaway_channel_id}>."
    if config.ticket_panel_channel_id:
        text += f"\n📩 Want to try out? Open a ticket in <#{config.ticket_panel_channel_id}>."
    return text


def is_admin_or_mod(member, config: BotConfig) -> bool:
    perms = getattr(member, "guild_permissions", None)
    if perms is not None and perms.administrator:
        return True
    return bool(config.mod_role_id) and any(role.id == config.mod_role_id for role in member.roles)


def panel_embed() -> discord.Embed:
    return discord.Embed(
        title=faq_content.PANEL_TITLE,
        description=faq_content.PANEL_DESCRIPTION,
        color=discord.Color.blue(),
    )


PERMISSION_DENIED = "⛔ Permission Denied: You must be an Administrator or a Moderator to use this command."


# =============================
# SLASH COMMANDS (ADMIN GROUP)
# =============================
@app_commands.command(name="setup-ticket", description="Set up the ticket creation panel")
@app_commands.default_permissions(administrator=True)
async def setup_ticket(interaction: discord.Interaction):
    if not is_admin_or_mod(interaction.user, interaction.client.config):
        return await interaction.response.send_message(PERMISSION_DENIED, ephemeral=True)

    await interaction.response.defer(ephemeral=True)
    try:
        await interaction.channel.send(embed=panel_embed(), view=TicketPanelView())
    except discord.HTTPException as e:
        logger.error("Failed to send ticket panel to %s: %s", interaction.channel.id, e)
        return await interaction.edit_original_response(content=f"Failed to create ticket panel: {e}")
    await interaction.edit_original_response(content="Ticket panel created!")


@app_commands.command(name="announce", description="Make an announcement")
@app_commands.default_permissions(administrator=True)
@app_commands.describe(message="The message to announce", channel="Channel to send to (optional)")
async def announce(interaction: discord.Interaction, message: str, channel: Optional[discord.TextChannel] = None):
    if not is_admin_or_mod(interaction.user, interaction.client.config):
        return await interaction.response.send_message(PERMISSION_DENIED, ephemeral=True)

    await interaction.response.defer(ephemeral=True)
    target = channel or interaction.channel
    try:
        await target.send(content=f"**Announcement**\n\n{message}")
    except discord.HTTPException as e:
        logger.error("Failed to send announcement to %s: %s", target.id, e)
        return await interaction.edit_original_response(content=f"Failed to send announcement: {e}")
    await interaction.edit_original_response(content="Announcement sent!")


@app_commands.command(name="close", description="Close the current ticket")
@app_commands.default_permissions(administrator=True)
async def close(interaction: discord.Interaction):
    controller = interaction.client.controller
    if not controller.is_tracked(interaction.channel.id):
        return await interaction.response.send_message(
            "This command can only be used in ticket channels.", ephemeral=True
        )
    if not controller.can_close(interaction.user):
        return await interaction.response.send_message(
            "⛔ Permission Denied: You are not allowed to close tickets.", ephemeral=True
        )

    delay = interaction.client.config.close_delay_seconds
    await interaction.response.send_message(f"Closing ticket in {delay} seconds...")
    await controller.close_ticket(interaction.channel, interaction.user)


# ---------------------------
# Bot Setup
# ---------------------------
class TicketBot(commands.Bot):
    def __init__(self, config: BotConfig):
        super().__init__(
            command_prefix="!",
            intents=discord.Intents.all(),
            application_id=config.client_id,
            activity=discord.Game(name=config.bot_status),
        )
        self.config = config
        tickets = JsonStore(os.path.join(config.data_dir, "tickets.json")).load()
        cooldowns = JsonStore(os.path.join(config.data_dir, "cooldowns.json")).load()
        tracker = OnboardingTracker(stages=build_stages(config.onboarding_stages))
        self.controller = TicketController(self, config, tickets, cooldowns, tracker)

    async def setup_hook(self):
        # Register persistent views
        self.add_view(TicketPanelView())
        self.add_view(FaqView())

        for command in (setup_ticket, announce, close):
            self.tree.add_command(command)
        if self.config.guild_id:
            guild = discord.Object(id=self.config.guild_id)
            self.tree.copy_global_to(guild=guild)
            await self.tree.sync(guild=guild)
        else:
            await self.tree.sync()
        logger.info("Application (/) commands synced.")

        self.inactivity_check.start()

    # ---------------------------
    # STARTUP FUNCTIONS
    # ---------------------------
    async def setup_ticket_panel(self):
        """Finds or sends the persistent ticket creation button."""
        if not self.config.ticket_panel_channel_id:
            logger.warning("TICKET_PANEL_CHANNEL_ID is not set. Skipping ticket panel setup.")
            return

        channel = self.get_channel(self.config.ticket_panel_channel_id)
        if not channel:
            logger.error("Could not find ticket panel channel with ID %s", self.config.ticket_panel_channel_id)
            return

        try:
            async for message in channel.history(limit=5):
                if message.author == self.user and message.components:
                    if message.components[0].children[0].custom_id == "create_ticket":
                        return
            await channel.send(embed=panel_embed(), view=TicketPanelView())
            logger.info("Sent new persistent ticket panel.")
        except discord.HTTPException as e:
            logger.error("Ticket panel setup failed: %s", e)

    async def on_ready(self):
        logger.info("Bot logged in successfully as %s", self.user)
        await self.setup_ticket_panel()

    # =============================
    # INACTIVITY REAPER
    # =============================
    @tasks.loop(hours=1)
    async def inactivity_check(self):
        logger.info("Running inactive ticket check...")
        try:
            await self.controller.reap_inactive()
        except Exception:
            logger.exception("Inactive ticket check failed; will retry next hour.")

    @inactivity_check.before_loop
    async def before_inactivity_check(self):
        await self.wait_until_ready()

    # =============================
    # ON MEMBER JOIN: WELCOME
    # =============================
    async def on_member_join(self, member: discord.Member):
        if not self.config.welcome_channel_id:
            return
        channel = self.get_channel(self.config.welcome_channel_id)
        if channel is None:
            logger.warning("Welcome channel %s not found.", self.config.welcome_channel_id)
            return
        try:
            await channel.send(welcome_message(member, self.config))
        except discord.HTTPException as e:
            logger.error("Failed to welcome %s: %s", member.id, e)

    # =============================
    # ON MESSAGE: ACTIVITY + ONBOARDING GATES
    # =============================
    async def on_message(self, message: discord.Message):
        if message.author.bot or message.guild is None:
            return

        if is_reset_command(message.content) and await self.handle_reset_command(message):
            return

        self.controller.record_activity(message)
        if await self.controller.capture_region(message):
            return
        await self.controller.enforce_screenshot_gate(message)

    async def handle_reset_command(self, message: discord.Message) -> bool:
        """Owner-only cooldown reset. Other authors fall through as normal chat."""
        if not self.config.secret_owner_id or message.author.id != self.config.secret_owner_id:
            return False

        try:
            await message.delete()
        except discord.HTTPException as e:
            logger.warning("Could not delete reset command message: %s", e)

        if message.mentions:
            user_id = message.mentions[0].id
        else:
            user_id = parse_user_id(message.content[len(RESET_COMMAND):])

        if user_id is None:
            reply = f"Usage: `{RESET_COMMAND} <@user|id>`"
        elif self.controller.reset_cooldown(user_id):
            logger.info("Cooldown reset for %s by owner", user_id)
            reply = f"✅ Cooldown removed for <@{user_id}>."
        else:
            reply = f"ℹ️ <@{user_id}> has no active cooldown."

        try:
            await message.channel.send(reply, delete_after=RESET_REPLY_DELETE_AFTER)
        except discord.HTTPException as e:
            logger.warning("Could not report cooldown reset: %s", e)
        return True


# =============================
# RUN BOT (Protected Initialization)
# =============================
def main():
    config = BotConfig.from_env()
    logging.basicConfig(format="%(asctime)s - %(levelname)s - %(name)s - %(message)s", level=config.log_level)

    # 1. Start Flask thread (only once)
    keep_alive(config.port)

    # 2. Start the Discord client (only once)
    bot = TicketBot(config)
    bot.run(config.token, log_handler=None)


if __name__ == "__main__":
    main()
