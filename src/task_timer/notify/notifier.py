# src/task_timer/notify/notifier.py

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

from ..core.errors import NotificationError

if TYPE_CHECKING:
    from ..tasks.task_models import Task

logger = logging.getLogger(__name__)


class PlyerNotifier:
    """
    Desktop notification through plyer.

    Platforms without a plyer backend make this a no-op (logged once).
    Any other failure is raised as NotificationError.
    """

    def __init__(self, *, app_name: str = "task_timer", timeout: int = 10) -> None:
        self._app_name = app_name
        self._timeout = int(timeout)
        self._unsupported = False

    def _send_sync(self, title: str, body: str) -> None:
        from plyer import notification

        notification.notify(
            title=title,
            message=body,
            app_name=self._app_name,
            timeout=self._timeout,
        )

    async def notify(self, title: str, body: str, payload: Task) -> None:
        if self._unsupported:
            return
        try:
            await asyncio.to_thread(self._send_sync, title, body)
        except NotImplementedError:
            self._unsupported = True
            logger.warning("Desktop notifications are not supported on this platform.")
            return
        except Exception as e:
            raise NotificationError(f"notification failed for task {payload.id}: {e}") from e
        logger.info("Notification sent: %s (task=%s)", title, payload.id)


class LogNotifier:
    """Notifier used when desktop notifications are disabled: log line only."""

    async def notify(self, title: str, body: str, payload: Task) -> None:
        logger.info("%s %s", title, body)
