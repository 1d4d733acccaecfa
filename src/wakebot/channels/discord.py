"""Discord channel adapter."""

from __future__ import annotations

from dataclasses import dataclass

import discord
from discord import app_commands
from discord.ext import commands
from loguru import logger

from wakebot.app.runtime import AppRuntime
from wakebot.channels.base import Notifier
from wakebot.core import remarks
from wakebot.errors import ConfigurationError, SessionInProgressError

COMMAND_DESCRIPTION = "✨ Squeak! Let Barry the magical mouse start your server! 🐭"


@dataclass(frozen=True)
class DiscordConfig:
    """Discord adapter config."""

    token: str
    command_name: str = "start-server"
    allow_channels: frozenset[str] = frozenset()


def user_mention(interaction: discord.Interaction) -> str:
    user = getattr(interaction, "user", None)
    if user is None:
        return ""
    return getattr(user, "mention", "") or ""


class DiscordNotifier(Notifier):
    """Drive one interaction: the original response is the acknowledgement."""

    name = "discord"

    def __init__(self, interaction: discord.Interaction) -> None:
        self._interaction = interaction

    async def post_initial_ack(self, text: str) -> None:
        await self._interaction.response.send_message(text)

    async def update_message(self, text: str) -> None:
        await self._interaction.edit_original_response(content=text)

    async def post_followup(self, text: str, mention: str | None = None) -> None:
        await self._interaction.followup.send(
            content=remarks.with_mention(text, mention),
            allowed_mentions=discord.AllowedMentions(users=True),
            wait=True,
        )


class _WakeBot(commands.Bot):
    async def setup_hook(self) -> None:
        synced = await self.tree.sync()
        logger.info("discord.commands.synced count={}", len(synced))


class DiscordChannel:
    """Discord adapter based on discord.py application commands."""

    name = "discord"

    def __init__(self, runtime: AppRuntime) -> None:
        self.runtime = runtime
        settings = runtime.settings
        self._config = DiscordConfig(
            token=settings.discord_token or "",
            command_name=settings.command_name,
            allow_channels=frozenset(settings.allowed_channel_ids),
        )
        self._bot: commands.Bot | None = None

    def build_bot(self) -> commands.Bot:
        bot = _WakeBot(command_prefix="!", intents=discord.Intents.default(), help_command=None)

        @bot.event
        async def on_ready() -> None:
            logger.info("discord.ready user={} id={}", str(bot.user), bot.user.id if bot.user else "<unknown>")

        async def start_server(interaction: discord.Interaction) -> None:
            await self.handle_start_server(interaction)

        bot.tree.add_command(
            app_commands.Command(
                name=self._config.command_name,
                description=COMMAND_DESCRIPTION,
                callback=start_server,
            )
        )
        return bot

    async def start(self) -> None:
        if not self._config.token:
            raise ConfigurationError(["discord_token"])

        bot = self.build_bot()
        self._bot = bot
        logger.info(
            "discord.start command={} target={} allow_channels_count={}",
            self._config.command_name,
            self.runtime.target,
            len(self._config.allow_channels),
        )
        try:
            async with bot:
                await bot.start(self._config.token)
        finally:
            self._bot = None
            logger.info("discord.stopped")

    async def stop(self) -> None:
        if self._bot is not None:
            await self._bot.close()

    async def handle_start_server(self, interaction: discord.Interaction) -> None:
        channel_id = str(interaction.channel_id or "")
        user_id = getattr(interaction.user, "id", "<unknown>")
        if self._config.allow_channels and channel_id not in self._config.allow_channels:
            logger.warning(
                "discord.inbound.denied channel_id={} sender_id={} reason=allow_channels", channel_id, user_id
            )
            await interaction.response.send_message(remarks.NOT_ALLOWED, ephemeral=True)
            return

        logger.info(
            "discord.inbound command={} channel_id={} sender_id={}", self._config.command_name, channel_id, user_id
        )
        if self.runtime.is_waking():
            await interaction.response.send_message(remarks.ALREADY_WAKING)
            return

        # Discord wants an answer within three seconds; the wake runs on its own task.
        notifier = DiscordNotifier(interaction)
        try:
            await notifier.post_initial_ack(remarks.ACKNOWLEDGED)
        except discord.HTTPException:
            logger.exception("discord.ack.error channel_id={}", channel_id)
            return

        try:
            self.runtime.wake(notifier, mention=user_mention(interaction))
        except SessionInProgressError:
            try:
                await notifier.update_message(remarks.ALREADY_WAKING)
            except discord.HTTPException:
                logger.exception("discord.edit.error channel_id={}", channel_id)
