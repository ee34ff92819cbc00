# Challenge wizard package init
import logging
import os


def _configure_logging() -> None:
    level_name = (os.getenv("CHALLENGE_WIZARD_LOG_LEVEL") or "INFO").upper()
    level = getattr(logging, level_name, logging.INFO)
    logger = logging.getLogger("challenge_wizard")
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter("[WIZARD][%(levelname)s] %(message)s"))
        logger.addHandler(handler)
    logger.setLevel(level)

    channel_level_name = (os.getenv("CHALLENGE_WIZARD_CHANNEL_LOG_LEVEL") or level_name).upper()
    channel_level = getattr(logging, channel_level_name, level)
    logging.getLogger("challenge_wizard.channel").setLevel(channel_level)


_configure_logging()
