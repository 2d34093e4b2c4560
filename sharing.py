"""
Telegram channel sharing for reading passages.

Posts a passage to the user's configured channel through the Telegram bot API.
"""
from __future__ import annotations

import logging
import os
from typing import Any, Dict, Optional

import requests

logger = logging.getLogger(__name__)

TELEGRAM_API_URL = os.getenv("TELEGRAM_API_URL", "https://api.telegram.org")
TELEGRAM_BOT_TOKEN = os.getenv("TELEGRAM_BOT_TOKEN")
REQUEST_TIMEOUT = 30


class ShareError(Exception):
    pass


def format_passage_message(passage: Dict[str, Any]) -> str:
    return f"📚 *{passage['title']}*\n\n{passage['content']}\n\nShared from TOEFL Prep App"


def send_channel_message(channel_id: str, text: str, token: Optional[str] = None) -> None:
    token = token or TELEGRAM_BOT_TOKEN
    if not token:
        raise ShareError("TELEGRAM_BOT_TOKEN is not set")

    url = f"{TELEGRAM_API_URL}/bot{token}/sendMessage"
    payload = {"chat_id": channel_id, "text": text, "parse_mode": "Markdown"}
    try:
        r = requests.post(url, json=payload, timeout=REQUEST_TIMEOUT)
    except requests.RequestException as exc:
        logger.error("Telegram request for channel %s failed: %s", channel_id, exc)
        raise ShareError("Failed to send message to Telegram") from exc

    if not r.ok:
        logger.error("Telegram rejected message for channel %s: %s %s", channel_id, r.status_code, r.text)
        raise ShareError("Failed to send message to Telegram")


def share_passage(passage: Dict[str, Any], channel_id: str) -> None:
    send_channel_message(channel_id, format_passage_message(passage))
    logger.info("Shared passage %s to channel %s", passage["id"], channel_id)
