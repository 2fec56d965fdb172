import logging

from telegram import Update

from solar_relay.bot.application import build_application
from solar_relay.core.config import load_settings
from solar_relay.core.logging import configure_logging
from solar_relay.factory import create_thingsboard_client

logger = logging.getLogger("solar_relay.bot")


def main() -> None:
    settings = load_settings()
    configure_logging(settings.log_level)

    client = create_thingsboard_client(settings)
    try:
        application = build_application(settings, client)
        logger.info("Telegram bot initialized.")
        application.run_polling(allowed_updates=Update.ALL_TYPES)
    finally:
        client.close()


if __name__ == "__main__":
    main()
