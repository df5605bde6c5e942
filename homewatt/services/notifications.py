"""Alert delivery using Apprise."""

import asyncio
import logging

import apprise

from homewatt.engine.alerts import Alert, Severity

logger = logging.getLogger(__name__)

SEVERITY_TYPES = {
    Severity.INFO: apprise.NotifyType.INFO,
    Severity.WARNING: apprise.NotifyType.WARNING,
}


class NotificationService:
    """Send notifications via Apprise."""

    async def send(
        self,
        urls: list[str],
        title: str,
        body: str,
        notify_type: str = apprise.NotifyType.INFO,
    ) -> dict:
        """Send notification to multiple Apprise URLs.

        Returns:
            Dict with success status and count of URLs
        """
        if not urls:
            logger.warning("No Apprise URLs provided, skipping notification")
            return {"success": False, "urls_count": 0, "error": "No URLs provided"}

        apobj = apprise.Apprise()
        for url in urls:
            apobj.add(url)

        try:
            success = await asyncio.to_thread(
                apobj.notify, title=title, body=body, notify_type=notify_type
            )
            logger.info(f"Notification sent to {len(urls)} URLs, success={success}")
            return {"success": success, "urls_count": len(urls)}
        except Exception as e:
            logger.error(f"Failed to send notification: {e}")
            return {"success": False, "urls_count": len(urls), "error": str(e)}

    def format_alert(self, user_id: str, alert: Alert) -> tuple[str, str]:
        """Format a live alert as a notification (title, body)."""
        return alert.title, f"**Household:** {user_id}\n\n{alert.message}"

    async def send_alert(self, urls: list[str], user_id: str, alert: Alert) -> dict:
        title, body = self.format_alert(user_id, alert)
        return await self.send(urls, title, body, notify_type=SEVERITY_TYPES[alert.severity])


# Global notification service instance
notification_service = NotificationService()
