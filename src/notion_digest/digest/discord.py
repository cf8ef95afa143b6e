"""
Client for Discord incoming webhooks.
"""

from datetime import date, datetime
from typing import Optional, Union

import requests
from loguru import logger

from .formatter import render_digest
from .tasks import fetch_tasks_for_date
from ..notion.client import NotionClient
from ..utils.config import Config
from ..utils.timeutil import today


class DiscordWebhook:
    """
    Posts plain messages to a Discord webhook.

    Failed posts are logged, not retried.
    """

    def __init__(self, webhook_url: str, timeout: int = 30, session: Optional[requests.Session] = None):
        """
        Initialize webhook client.

        Args:
            webhook_url: Discord webhook URL
            timeout: Request timeout in seconds
            session: HTTP session to use (optional)
        """
        self.webhook_url = webhook_url
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update({
            "Content-Type": "application/json",
            "User-Agent": "NotionDigest/0.1.0",
        })

    def send(self, content: str) -> bool:
        """
        Send a message.

        Args:
            content: Message text

        Returns:
            True if Discord accepted the message, False otherwise
        """
        if not self.webhook_url:
            logger.error("DISCORD_WEBHOOK_URL is not set, skipping send")
            return False

        try:
            response = self.session.post(self.webhook_url, json={"content": content}, timeout=self.timeout)
            response.raise_for_status()
        except requests.exceptions.HTTPError as e:
            logger.error(f"Discord rejected the message: {e.response.status_code} {e.response.text}")
            return False
        except requests.exceptions.RequestException as e:
            logger.error(f"Error sending to Discord: {e}")
            return False

        logger.info(f"Discord send result: {response.status_code}")
        return True


def run_daily_digest(config: Optional[Config] = None, target: Optional[Union[date, datetime]] = None,
                     notion: Optional[NotionClient] = None, webhook: Optional[DiscordWebhook] = None,
                     dry_run: bool = False) -> str:
    """
    Fetch a day's tasks, render the digest and post it to Discord.

    Args:
        config: Configuration (loaded from the environment if omitted)
        target: Day to report (today in Asia/Tokyo if omitted)
        notion: Notion client (built from ``config`` if omitted)
        webhook: Webhook client (built from ``config`` if omitted)
        dry_run: Render only, do not send

    Returns:
        The rendered message
    """
    config = config or Config()
    target = target or today()
    mapping = config.column_mapping()

    records = []
    if config.notion_api_token and config.database_id:
        notion = notion or NotionClient(config.notion_api_token)
        records = fetch_tasks_for_date(notion, config, mapping, target)
    else:
        logger.error("NOTION_API_TOKEN / DATABASE_ID are not set, reporting no tasks")
    logger.info(f"Fetched {len(records)} task(s) for {target}")

    message = render_digest(records, target, mapping)
    logger.info(f"Message to send: {message}")

    if dry_run:
        logger.info("Dry run: not sending to Discord")
        return message

    webhook = webhook or DiscordWebhook(config.discord_webhook_url)
    webhook.send(message)
    return message
