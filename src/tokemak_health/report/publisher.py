from __future__ import annotations

import asyncio
import json
import logging

import backoff
import requests

from ..constants import TELEGRAM_API_URL
from ..settings import DryRunFormat, HealthSettings
from .formatter import format_report_message, format_report_table
from .generator import HealthReport

logger = logging.getLogger(__name__)


@backoff.on_exception(
    backoff.expo,
    (requests.exceptions.RequestException, requests.exceptions.HTTPError),
    max_tries=5,
    giveup=lambda e: (
        isinstance(e, requests.exceptions.HTTPError)
        and e.response is not None
        and e.response.status_code not in {429, 500, 502, 503, 504}
    ),
    jitter=backoff.full_jitter,
)
async def _post_with_retry(url: str, payload: dict[str, object]):
    response = await asyncio.to_thread(requests.post, url, json=payload, timeout=10.0)
    response.raise_for_status()
    return response


async def send_telegram_message(
    config: HealthSettings,
    text: str,
    chat_id: str,
) -> bool:
    """Send ``text`` to a Telegram chat.

    Delivery failures are logged and reported through the return value;
    they never invalidate the report being delivered.

    Returns:
        True when Telegram accepted the message
    """
    if config.telegram_token is None:
        logger.warning("telegram_token not configured; message to %s not sent", chat_id)
        return False

    url = f"{TELEGRAM_API_URL}/bot{config.telegram_token.get_secret_value()}/sendMessage"
    try:
        await _post_with_retry(url, {"chat_id": chat_id, "text": text})
    except requests.exceptions.RequestException as e:
        # the token is part of the URL, keep it out of the log
        status = getattr(getattr(e, "response", None), "status_code", None)
        logger.error(
            "Failed to deliver Telegram message to %s (status=%s, error=%s)",
            chat_id,
            status,
            type(e).__name__,
        )
        return False

    logger.info("Telegram message delivered to %s", chat_id)
    return True


async def publish_to_stdout(
    report: HealthReport,
    dry_run_format: DryRunFormat = DryRunFormat.TABLE,
) -> None:
    """Publish report to stdout (dry run mode)."""
    if dry_run_format == DryRunFormat.JSON:
        print(json.dumps(report.to_dict(), indent=2))
    else:
        format_report_table(report)


async def publish_report(config: HealthSettings, report: HealthReport) -> bool:
    """Publish the report based on configuration.

    - If dry_run: print to stdout
    - Otherwise: send the text report to the committee chat

    Returns:
        Whether the report reached its destination
    """
    if config.dry_run:
        await publish_to_stdout(report, config.dry_run_format)
        return True

    return await send_telegram_message(
        config, format_report_message(report), config.telegram_chat_id
    )


async def notify_operator(config: HealthSettings, text: str) -> bool:
    """Send an operational alert (e.g. a failed cycle) to the operator chat."""
    if config.operator_chat_id is None:
        return False
    return await send_telegram_message(config, text, config.operator_chat_id)
