"""
python-telegram-bot wiring: long polling, command registration, delivery.
"""

from __future__ import annotations

import asyncio
import logging

from telegram import BotCommand, Update
from telegram.ext import Application, ContextTypes, MessageHandler, filters

from solar_relay.bot.commands import (
    BOT_COMMANDS,
    GENERIC_FAILURE_MESSAGE,
    BotReply,
    CommandDispatcher,
)
from solar_relay.clients.thingsboard import ThingsBoardClient
from solar_relay.core.config import Settings
from solar_relay.services.auth import AuthTokenProvider
from solar_relay.services.telemetry import TelemetryService

logger = logging.getLogger(__name__)


async def deliver(update: Update, reply: BotReply) -> None:
    message = update.effective_message
    if message is None:
        return
    if reply.document is not None:
        await message.reply_document(document=reply.document, filename=reply.filename)
    elif reply.text:
        await message.reply_text(reply.text)


class SolarBotHandlers:
    def __init__(self, dispatcher: CommandDispatcher) -> None:
        self._dispatcher = dispatcher

    async def on_message(self, update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
        message = update.effective_message
        if message is None:
            return
        chat_id = update.effective_chat.id if update.effective_chat else None
        logger.info("Chat %s sent %r", chat_id, (message.text or "")[:64])

        # The pipeline is blocking; keep it off the event loop.
        reply = await asyncio.to_thread(self._dispatcher.dispatch, message.text)
        await deliver(update, reply)

    async def on_error(self, update: object, context: ContextTypes.DEFAULT_TYPE) -> None:
        logger.error("Unhandled error while processing update", exc_info=context.error)
        if isinstance(update, Update) and update.effective_message is not None:
            try:
                await update.effective_message.reply_text(GENERIC_FAILURE_MESSAGE)
            except Exception:  # noqa: BLE001 - the chat may be unreachable
                logger.warning("Could not notify chat about the failure", exc_info=True)


async def _register_commands(application: Application) -> None:
    await application.bot.set_my_commands(
        [BotCommand(command, description) for command, description in BOT_COMMANDS]
    )
    logger.info("Telegram bot commands registered")


def build_application(settings: Settings, client: ThingsBoardClient) -> Application:
    if not settings.telegram_bot_token:
        raise RuntimeError("TELEGRAM_BOT_TOKEN is not set in environment variables.")

    dispatcher = CommandDispatcher(
        auth=AuthTokenProvider(client=client, settings=settings),
        telemetry=TelemetryService(client=client, settings=settings),
    )
    handlers = SolarBotHandlers(dispatcher)

    application = (
        Application.builder()
        .token(settings.telegram_bot_token)
        .post_init(_register_commands)
        .build()
    )
    application.add_handler(MessageHandler(filters.TEXT, handlers.on_message))
    application.add_error_handler(handlers.on_error)
    return application
