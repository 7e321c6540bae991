"""
OrgPulse Cache Warmer

Optionally pre-computes analytics for a fixed set of organizations on an
interval so dashboard reads hit a warm cache. The engine itself never starts
this; a hosting process embeds it next to the facade it serves, either
in its main loop (start) or on a daemon thread (start_background).
"""

import logging
import signal
import threading
from typing import Iterable, Optional

import schedule

from .facade import AnalyticsFacade


class CacheWarmer:
    """Refreshes the facade cache for configured organizations at regular intervals."""

    def __init__(
        self,
        facade: AnalyticsFacade,
        organization_ids: Iterable[int],
        interval_seconds: int = 60,
        scheduler: Optional[schedule.Scheduler] = None,
    ):
        self.facade = facade
        self.organization_ids = list(organization_ids)
        self.interval_seconds = interval_seconds
        self.scheduler = scheduler or schedule.Scheduler()
        self._stopped = threading.Event()
        self.logger = logging.getLogger(__name__)

    @property
    def running(self) -> bool:
        return not self._stopped.is_set()

    def _signal_handler(self, signum, frame):
        """Handle shutdown signals gracefully."""
        self.logger.info(f"Received signal {signum}, shutting down...")
        self._stopped.set()

    def warm(self) -> int:
        """
        Compute analytics for every configured organization.

        A failing organization is logged and skipped so the others still warm.

        Returns:
            Number of organizations warmed successfully
        """
        warmed = 0
        for organization_id in self.organization_ids:
            try:
                self.facade.get_analytics(organization_id)
                warmed += 1
            except Exception as e:
                self.logger.error(f"❌ Warming organization {organization_id} failed: {e}")

        self.logger.info(f"✅ Warmed {warmed}/{len(self.organization_ids)} organization(s)")
        return warmed

    def schedule_jobs(self) -> None:
        self.scheduler.every(self.interval_seconds).seconds.do(self.warm)

        self.logger.info("📅 Scheduled jobs:")
        for job in self.scheduler.jobs:
            self.logger.info(f"   {job}")

    def start(self, install_signal_handlers: bool = True) -> None:
        """Start the warmer loop until stopped or signalled."""
        self.logger.info("🚀 Starting OrgPulse cache warmer...")

        # Signal handlers can only be installed from the main thread
        if install_signal_handlers:
            signal.signal(signal.SIGINT, self._signal_handler)
            signal.signal(signal.SIGTERM, self._signal_handler)

        try:
            self.schedule_jobs()
            self.warm()

            # wait() doubles as the poll interval and returns early on stop()
            while not self._stopped.wait(1):
                self.scheduler.run_pending()

        except KeyboardInterrupt:
            self.logger.info("⏹️  Cache warmer stopped by user")
        finally:
            self.scheduler.clear()
            self.logger.info("👋 OrgPulse cache warmer stopped")

    def stop(self) -> None:
        """Stop the warmer loop. A warmer that is stopped before it starts exits immediately."""
        self._stopped.set()
        self.logger.info("🛑 Stopping cache warmer...")

    def start_background(self) -> threading.Thread:
        """Run the warmer loop on a daemon thread."""
        thread = threading.Thread(
            target=self.start,
            kwargs={"install_signal_handlers": False},
            name="orgpulse-cache-warmer",
            daemon=True,
        )
        thread.start()
        return thread
