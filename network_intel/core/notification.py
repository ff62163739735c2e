"""
Owner Notification - push a short message to the owner's webhook

Callers treat this as best-effort: a False return or a raised transport
error is logged and never fails the calling operation.
"""

import httpx

from network_intel.core.environment import env_config
from network_intel.core.logger import get_logger

logger = get_logger(__name__)

NOTIFY_TIMEOUT_SECONDS = 10.0


async def notify_owner(title: str, content: str) -> bool:
    """
    POST {title, content} to OWNER_NOTIFY_URL.

    Returns:
        True if the webhook accepted the message, False if no webhook is
        configured or it answered with a non-2xx status.

    Raises:
        httpx.HTTPError: on transport failures
    """
    url = env_config.get("owner_notify_url")
    if not url:
        logger.debug("Owner notification skipped, no webhook configured: %s", title)
        return False

    async with httpx.AsyncClient(timeout=NOTIFY_TIMEOUT_SECONDS) as client:
        response = await client.post(url, json={"title": title, "content": content})

    if not response.is_success:
        logger.warning("Owner notification rejected (%s): %s", response.status_code, title)
        return False
    return True
