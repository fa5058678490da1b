import logging

import httpx
from telegram import Bot
from telegram.constants import ParseMode
from telegram.error import NetworkError, TelegramError, TimedOut
from tenacity import (
    AsyncRetrying,
    before_sleep_log,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

from dogdoor_detector.core.errors import ConfigurationError, NotificationError
from dogdoor_detector.detection.config import notification_config, NotificationConfig

logger = logging.getLogger(__name__)


def is_transport_failure(exception: BaseException) -> bool:
    """True when the request failed before Telegram answered with a status code.

    python-telegram-bot raises NetworkError for 5xx responses too; only the
    ones chained to an httpx transport error carry no response.
    """
    if isinstance(exception, TimedOut):
        return True
    return isinstance(exception, NetworkError) and isinstance(exception.__cause__, httpx.TransportError)


class TelegramNotifier:
    """Sends alerts to a Telegram chat.

    Timeouts and connection failures are retried with exponential backoff; any
    HTTP response other than success is final.
    """

    def __init__(self, config: NotificationConfig = notification_config, bot: Bot | None = None):
        if not config.bot_token:
            logger.error("DETECTOR_TG_KEY environment variable is not set")
            raise ConfigurationError("DETECTOR_TG_KEY environment variable is required")
        if not config.chat_id:
            logger.error("DETECTOR_TG_CHAT environment variable is not set")
            raise ConfigurationError("DETECTOR_TG_CHAT environment variable is required")

        self.chat_id = config.chat_id
        self.max_attempts = config.max_attempts
        self.backoff_base = config.backoff_base
        self.bot = bot if bot is not None else Bot(config.bot_token)

    async def initialize(self) -> None:
        """Set up the bot's HTTP client and check the token.

        Telegram being unreachable at startup is not fatal: the bot still
        connects on the first send.
        """
        try:
            await self.bot.initialize()
        except TelegramError as e:
            logger.warning(f"Could not reach Telegram at startup, continuing without it: {type(e).__name__}: {e}")
            return
        logger.info(f"Telegram bot initialized for {self.chat_id=}")

    async def shutdown(self) -> None:
        await self.bot.shutdown()

    def _retrying(self) -> AsyncRetrying:
        return AsyncRetrying(
            stop=stop_after_attempt(self.max_attempts),
            wait=wait_exponential(multiplier=self.backoff_base),
            retry=retry_if_exception(is_transport_failure),
            before_sleep=before_sleep_log(logger, logging.WARNING),
            reraise=True,
        )

    async def send(self, message: str, silent: bool = False) -> None:
        """Send a MarkdownV2 message to the configured chat.

        Args:
            message: Text already escaped for MarkdownV2
            silent: Deliver without a notification sound

        Raises:
            NotificationError: the message could not be delivered
        """
        logger.info(f"Sending message to Telegram: {message=} {silent=}")
        try:
            async for attempt in self._retrying():
                with attempt:
                    await self.bot.send_message(
                        chat_id=self.chat_id,
                        text=message,
                        parse_mode=ParseMode.MARKDOWN_V2,
                        disable_notification=silent,
                    )
        except TelegramError as e:
            raise NotificationError(f"Telegram sendMessage failed: {type(e).__name__}: {e}") from e
        logger.info("Message sent successfully")
