import logging

import notifiers.logging

from prstate import config

logger = logging.getLogger("prstate")


def get_log_handlers(logger):
    if config.TELEGRAM_TOKEN is None:
        return []
    handler = notifiers.logging.NotificationHandler(
        "telegram",
        defaults={
            "token": config.TELEGRAM_TOKEN,
            "chat_id": config.TELEGRAM_CHAT_ID,
        },
    )
    handler.setLevel(logging.WARNING)
    logger.addHandler(handler)
    return [handler]


def configure_logging():
    logging.basicConfig(
        format="%(asctime)s %(name)s %(levelname)s - %(message)s",
        level=logging.INFO,
    )
    logger.setLevel(config.OVERRIDE_LOGGING)
    return get_log_handlers(logger)
