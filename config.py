# -*- coding: utf-8 -*-
import logging
import os
import re

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

# Discord snowflakes are 17-20 digit integers
SNOWFLAKE_RE = re.compile(r"^\d{17,20}$")

DEFAULT_STATUS = "Use /setup-ticket to get started"


def parse_role_id(raw):
    """Normalises a role id entry like '123...  # Support' to an int, or None."""
    if raw is None:
        return None
    value = str(raw).split("#", 1)[0].strip()
    if not value:
        return None
    if not SNOWFLAKE_RE.match(value):
        logger.warning("Ignoring malformed role id entry: %r", raw)
        return None
    return int(value)


def _optional_id(env, name):
    raw = env.get(name)
    if not raw:
        return None
    try:
        return int(str(raw).split("#", 1)[0].strip())
    except ValueError:
        logger.warning("Ignoring invalid id for %s: %r", name, raw)
        return None


def _int(env, name, default):
    raw = env.get(name)
    if raw in (None, ""):
        return default
    try:
        return int(raw)
    except ValueError:
        logger.warning("Invalid integer for %s: %r, using %s", name, raw, default)
        return default


def _flag(env, name, default):
    raw = env.get(name)
    if raw in (None, ""):
        return default
    return str(raw).strip().lower() in ("1", "true", "yes", "on")


def _stages(env):
    raw = env.get("ONBOARDING_STAGES")
    if raw is None:
        return ("region", "screenshot")
    return tuple(part.strip().lower() for part in raw.split(",") if part.strip())


class BotConfig:
    """Runtime settings read from the environment (and an optional .env file)."""

    def __init__(self, token, **options):
        self.token = token
        self.client_id = options.get("client_id")
        self.guild_id = options.get("guild_id")
        self.mod_role_id = options.get("mod_role_id")
        self.admin_role_id = options.get("admin_role_id")
        self.close_role_ids = list(options.get("close_role_ids", []))
        self.ticket_category_id = options.get("ticket_category_id")
        self.welcome_channel_id = options.get("welcome_channel_id")
        self.rules_channel_id = options.get("rules_channel_id")
        self.giveaway_channel_id = options.get("giveaway_channel_id")
        self.ticket_panel_channel_id = options.get("ticket_panel_channel_id")
        self.secret_owner_id = options.get("secret_owner_id")
        self.port = options.get("port", 8080)
        self.cooldown_hours = options.get("cooldown_hours", 48)
        self.inactive_hours = options.get("inactive_hours", 72)
        self.close_delay_seconds = options.get("close_delay_seconds", 5)
        self.transcript_limit = options.get("transcript_limit", 100)
        self.send_transcripts = options.get("send_transcripts", True)
        self.lock_until_read = options.get("lock_until_read", True)
        self.onboarding_stages = tuple(options.get("onboarding_stages", ("region", "screenshot")))
        self.bot_status = options.get("bot_status", DEFAULT_STATUS)
        self.data_dir = options.get("data_dir", ".")
        self.log_level = options.get("log_level", "INFO")

    @property
    def staff_role_ids(self):
        """Roles granted full access to every ticket channel."""
        ids = []
        for role_id in [self.mod_role_id, self.admin_role_id, *self.close_role_ids]:
            if role_id and role_id not in ids:
                ids.append(role_id)
        return ids

    @property
    def cooldown_ms(self):
        return self.cooldown_hours * 60 * 60 * 1000

    @property
    def inactive_ms(self):
        return self.inactive_hours * 60 * 60 * 1000

    @classmethod
    def from_env(cls, env=None):
        if env is None:
            load_dotenv()
            env = os.environ

        token = env.get("DISCORD_TOKEN")
        if not token:
            raise ValueError("DISCORD_TOKEN environment variable is required.")

        close_role_ids = []
        for i in (1, 2, 3):
            role_id = parse_role_id(env.get(f"CLOSE_ROLE_ID_{i}"))
            if role_id:
                close_role_ids.append(role_id)

        return cls(
            token,
            client_id=_optional_id(env, "CLIENT_ID"),
            guild_id=_optional_id(env, "GUILD_ID"),
            mod_role_id=parse_role_id(env.get("MOD_ROLE_ID")),
            admin_role_id=parse_role_id(env.get("ADMIN_ROLE_ID")),
            close_role_ids=close_role_ids,
            ticket_category_id=_optional_id(env, "TICKET_CATEGORY_ID"),
            welcome_channel_id=_optional_id(env, "WELCOME_CHANNEL_ID"),
            rules_channel_id=_optional_id(env, "RULES_CHANNEL_ID"),
            giveaway_channel_id=_optional_id(env, "GIVEAWAY_CHANNEL_ID"),
            ticket_panel_channel_id=_optional_id(env, "TICKET_PANEL_CHANNEL_ID"),
            secret_owner_id=_optional_id(env, "SECRET_OWNER_ID"),
            port=_int(env, "PORT", 8080),
            cooldown_hours=_int(env, "COOLDOWN_HOURS", 48),
            inactive_hours=_int(env, "INACTIVE_HOURS", 72),
            close_delay_seconds=_int(env, "CLOSE_DELAY_SECONDS", 5),
            transcript_limit=_int(env, "TRANSCRIPT_LIMIT", 100),
            send_transcripts=_flag(env, "SEND_TRANSCRIPTS", True),
            lock_until_read=_flag(env, "LOCK_UNTIL_READ", True),
            onboarding_stages=_stages(env),
            bot_status=env.get("BOT_STATUS") or DEFAULT_STATUS,
            data_dir=env.get("DATA_DIR") or ".",
            log_level=(env.get("LOG_LEVEL") or "INFO").upper(),
        )
