# -*- coding: utf-8 -*-
import asyncio
import enum
import logging
import time
from typing import NamedTuple

import discord

import faq_content
from cooldown import check_cooldown, format_remaining
from transcripts import find_ticket_owner, send_transcript
from views import FaqView

logger = logging.getLogger(__name__)

# Seconds before the "screenshot required" warning removes itself
WARNING_DELETE_AFTER = 5


def now_ms() -> int:
    return int(time.time() * 1000)


class TicketState(enum.Enum):
    NONE = "none"
    LOCKED = "locked"
    READING = "reading"
    AWAITING_REGION = "awaiting_region"
    AWAITING_SCREENSHOT = "awaiting_screenshot"
    OPEN = "open"
    CLOSING = "closing"


class TopicProgress(NamedTuple):
    count: int
    total: int
    unlocked_now: bool = False

    @property
    def remaining(self):
        return self.total - self.count


# ---------------------------
# CORE TICKET LOGIC
# ---------------------------
class TicketController:
    """Owns a ticket channel's lifecycle from creation through onboarding to closure.

    ``tickets`` and ``cooldowns`` are :class:`storage.JsonStore` instances;
    ``tracker`` is an :class:`onboarding.OnboardingTracker`. All three are
    owned by the controller and only mutated through it.
    """

    def __init__(self, bot, config, tickets, cooldowns, tracker, clock=now_ms):
        self.bot = bot
        self.config = config
        self.tickets = tickets
        self.cooldowns = cooldowns
        self.tracker = tracker
        self.clock = clock
        self._owners: dict[int, int] = {}
        self._locks: dict[int, asyncio.Lock] = {}
        self._closing: dict[int, asyncio.Task] = {}

    # --- state helpers ---

    def is_tracked(self, channel_id) -> bool:
        return channel_id in self.tickets

    def state(self, channel_id) -> TicketState:
        if channel_id in self._closing:
            return TicketState.CLOSING
        if not self.is_tracked(channel_id):
            return TicketState.NONE
        pending = self.tracker.pending_stage(channel_id)
        if pending == "region":
            return TicketState.AWAITING_REGION
        if pending == "screenshot":
            return TicketState.AWAITING_SCREENSHOT
        if self.tracker.is_unlocked(channel_id):
            return TicketState.OPEN
        if self.tracker.progress.get(channel_id):
            return TicketState.READING
        return TicketState.LOCKED

    def pending_close(self, channel_id):
        return self._closing.get(channel_id)

    def _lock(self, channel_id):
        return self._locks.setdefault(channel_id, asyncio.Lock())

    def is_staff(self, member) -> bool:
        perms = getattr(member, "guild_permissions", None)
        if perms is not None and perms.administrator:
            return True
        role_ids = {role.id for role in getattr(member, "roles", [])}
        return any(role_id in role_ids for role_id in self.config.staff_role_ids)

    def can_close(self, member) -> bool:
        perms = getattr(member, "guild_permissions", None)
        if perms is not None and perms.administrator:
            return True
        role_ids = {role.id for role in getattr(member, "roles", [])}
        allowed = [self.config.mod_role_id, *self.config.close_role_ids]
        return any(role_id and role_id in role_ids for role_id in allowed)

    def _purge(self, channel_id):
        self.tickets.delete(channel_id)
        self.tracker.forget(channel_id)
        self._owners.pop(channel_id, None)
        self._locks.pop(channel_id, None)

    # --- creation ---

    def _overwrites(self, guild, user):
        full_access = discord.PermissionOverwrite(
            view_channel=True,
            send_messages=True,
            read_message_history=True,
            attach_files=True,
            manage_messages=True,
        )
        overwrites = {
            guild.default_role: discord.PermissionOverwrite(view_channel=False),
            user: discord.PermissionOverwrite(
                view_channel=True,
                read_message_history=True,
                attach_files=True,
                send_messages=not self.config.lock_until_read,
            ),
            guild.me: full_access,
        }
        for role_id in self.config.staff_role_ids:
            role = guild.get_role(role_id)
            if role is None:
                logger.warning("Staff role %s not found in guild %s, skipping.", role_id, guild.id)
                continue
            overwrites[role] = full_access
        return overwrites

    async def create_ticket(self, interaction):
        """Checks the cooldown, opens the ticket channel and posts the FAQ buttons."""
        user = interaction.user
        status = check_cooldown(self.clock(), self.cooldowns.get(user.id), self.config.cooldown_ms)
        if not status.allowed:
            await interaction.response.send_message(
                embed=discord.Embed(
                    title="⏳ Cooldown Active - Please Wait",
                    description="You recently opened a ticket. You can open your next ticket in:\n"
                                f"**`{format_remaining(status)}`**",
                    color=discord.Color.orange(),
                ),
                ephemeral=True,
            )
            return None

        await interaction.response.defer(ephemeral=True, thinking=True)

        guild = interaction.guild
        category = guild.get_channel(self.config.ticket_category_id) if self.config.ticket_category_id else None
        try:
            channel = await guild.create_text_channel(
                f"ticket-{user.name}",
                category=category,
                overwrites=self._overwrites(guild, user),
            )
        except discord.Forbidden:
            logger.error("Missing permissions to create a ticket channel in guild %s", guild.id)
            await interaction.followup.send(
                "❌ Error: I lack necessary permissions (e.g., Manage Channels) to create your ticket.",
                ephemeral=True,
            )
            return None
        except discord.HTTPException as e:
            logger.error("Error creating ticket for %s: %s", user.id, e)
            await interaction.followup.send(f"Failed to create ticket.\n**Reason:** {e}", ephemeral=True)
            return None

        now = self.clock()
        self.tickets.set(channel.id, now)
        self.cooldowns.set(user.id, now)
        self._owners[channel.id] = user.id
        logger.info("Ticket #%s created for %s", channel.name, user.id)

        embed = discord.Embed(
            title=faq_content.WELCOME_TITLE.format(name=user.name),
            description=faq_content.WELCOME_DESCRIPTION,
            color=discord.Color.blue(),
        )
        try:
            await channel.send(
                content=f"Hello {user.mention} | Welcome to support!",
                embed=embed,
                view=FaqView(),
            )
        except discord.HTTPException as e:
            logger.error("Failed to send welcome message in #%s: %s", channel.name, e)

        await interaction.followup.send(f"Ticket created: {channel.mention}", ephemeral=True)
        return channel

    # --- onboarding ---

    def _owner_of(self, channel):
        user_id = self._owners.get(channel.id)
        if user_id is not None:
            member = channel.guild.get_member(user_id)
            if member is not None:
                return member
        return find_ticket_owner(channel, self.bot.user.id)

    async def acknowledge_topic(self, channel, topic):
        """Marks an FAQ topic as read; the last one unlocks the chat.

        Returns None when ``channel`` is not a tracked ticket.
        """
        if not self.is_tracked(channel.id):
            return None

        async with self._lock(channel.id):
            total = self.tracker.total
            if self.tracker.is_unlocked(channel.id):
                return TopicProgress(total, total)

            count = self.tracker.acknowledge(channel.id, topic)
            if count < total:
                return TopicProgress(count, total)

            self.tracker.mark_unlocked(channel.id)
            await self._unlock_chat(channel)
            return TopicProgress(total, total, unlocked_now=True)

    async def _unlock_chat(self, channel):
        owner = self._owner_of(channel)
        if owner is None:
            logger.warning("Could not find the owner of #%s to unlock chat.", channel.name)
        else:
            try:
                await channel.set_permissions(
                    owner,
                    view_channel=True,
                    read_message_history=True,
                    attach_files=True,
                    send_messages=True,
                )
            except discord.HTTPException as e:
                logger.error("Failed to unlock chat in #%s: %s", channel.name, e)

        stage = self.tracker.begin_stages(channel.id)
        notice = "🔓 **All sections read!** The chat is now unlocked."
        if stage is not None:
            notice += f"\n\n{stage.prompt}"
        await self._send(channel, notice)

    async def capture_region(self, message) -> bool:
        """Stores the first non-empty, non-staff reply while a region is pending."""
        channel = message.channel
        if self.tracker.pending_stage(channel.id) != "region" or self.is_staff(message.author):
            return False

        async with self._lock(channel.id):
            if self.tracker.pending_stage(channel.id) != "region":
                return False
            region = (message.content or "").strip()
            if not region:
                return False
            self.tracker.set_region(channel.id, region)
            await self._finish_stage(channel, message.author, f"✅ Region saved: **{region}**")
            return True

    async def enforce_screenshot_gate(self, message) -> bool:
        """Deletes text-only messages until a screenshot is posted."""
        channel = message.channel
        if self.tracker.pending_stage(channel.id) != "screenshot" or self.is_staff(message.author):
            return False

        async with self._lock(channel.id):
            if self.tracker.pending_stage(channel.id) != "screenshot":
                return False

            if not message.attachments:
                try:
                    await message.delete()
                except discord.HTTPException as e:
                    logger.error("Failed to delete message in #%s: %s", channel.name, e)
                await self._send(
                    channel,
                    f"{message.author.mention} 📸 Please upload a **screenshot** to continue. "
                    "Messages without an image are removed.",
                    delete_after=WARNING_DELETE_AFTER,
                )
                return True

            await self._finish_stage(channel, message.author, "✅ Screenshot received!")
            return True

    async def _finish_stage(self, channel, author, ack):
        stage = self.tracker.advance(channel.id)
        if stage is not None:
            await self._send(channel, f"{ack}\n\n{stage.prompt}")
            return

        region = self.tracker.pop_region(channel.id)
        text = f"{ack}\n\n🎉 {author.mention} verification complete! A staff member will be with you shortly."
        if region:
            text += f"\n🌍 **Region:** {region}"
        await self._send(channel, text)
        logger.info("Onboarding complete in #%s", channel.name)

    async def _send(self, channel, content, **kwargs):
        try:
            return await channel.send(content, **kwargs)
        except discord.HTTPException as e:
            logger.error("Failed to send message in #%s: %s", getattr(channel, "name", channel.id), e)
            return None

    # --- activity & cooldowns ---

    def record_activity(self, message) -> bool:
        if message.author.bot or not self.is_tracked(message.channel.id):
            return False
        self.tickets.set(message.channel.id, self.clock())
        return True

    def reset_cooldown(self, user_id) -> bool:
        """Clears a user's cooldown; returns False if there was none."""
        return self.cooldowns.delete(user_id)

    # --- closure ---

    async def close_ticket(self, channel, invoker) -> bool:
        """Sends the transcript, then deletes the channel after the grace delay."""
        if not self.can_close(invoker):
            return False
        if channel.id in self._closing:
            return True

        if self.config.send_transcripts:
            # the delete below must be scheduled whatever happens to the transcript
            try:
                await send_transcript(channel, self.bot.user.id, limit=self.config.transcript_limit)
            except Exception:
                logger.exception("Transcript step failed for #%s", channel.name)

        logger.info("Ticket #%s closed by %s", channel.name, invoker.id)
        self._closing[channel.id] = asyncio.create_task(
            self._delete_later(channel, self.config.close_delay_seconds)
        )
        return True

    async def _delete_later(self, channel, delay):
        try:
            await asyncio.sleep(delay)
            try:
                await channel.delete(reason="Ticket closed")
            except discord.NotFound:
                pass
            except discord.HTTPException as e:
                logger.error("Failed to delete channel #%s: %s", channel.name, e)
                return
            self._purge(channel.id)
        finally:
            self._closing.pop(channel.id, None)

    async def reap_inactive(self, now=None) -> list[int]:
        """Closes every tracked ticket idle for longer than the inactivity limit."""
        now = self.clock() if now is None else now
        reaped = []
        for key, last_active in self.tickets.items():
            if now - last_active <= self.config.inactive_ms:
                continue
            try:
                if await self._reap_one(key):
                    reaped.append(int(key))
            except Exception:
                logger.exception("Inactive ticket check failed for %r, continuing.", key)
        if reaped:
            logger.info("Inactive ticket check closed %d ticket(s).", len(reaped))
        return reaped

    async def _reap_one(self, key) -> bool:
        if not str(key).isdigit():
            logger.warning("Dropping malformed ticket record %r.", key)
            self.tickets.delete(key)
            return False

        channel_id = int(key)
        channel = self.bot.get_channel(channel_id)
        if channel is None:
            logger.info("Purging ticket record %s: channel no longer exists.", channel_id)
            self._purge(channel_id)
            return True
        try:
            await channel.send(f"Ticket closed due to inactivity ({self.config.inactive_hours}h).")
            await channel.delete(reason="Ticket inactive")
        except discord.NotFound:
            pass
        except discord.HTTPException as e:
            logger.error("Failed to close ticket %s: %s", channel_id, e)
            return False
        self._purge(channel_id)
        return True
