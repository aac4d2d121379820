"""
FinishLine
Change-request notifications.

Posts a "new change request" message to the owning team's Slack channel,
plus a copy to the e-board channel when the requested budget impact is
above SLACK_BUDGET_ALERT_THRESHOLD. With notifications disabled the
message is only logged.
"""

import logging

from flask import current_app

from finishline.integrations.slack_gateway import slack_gateway

logger = logging.getLogger(__name__)


def build_change_request_blocks(full_message: str, cr_link: str, cr_id: int) -> list[dict]:
    return [
        {"type": "section", "text": {"type": "mrkdwn", "text": full_message}},
        {
            "type": "actions",
            "elements": [{
                "type": "button",
                "text": {"type": "plain_text", "text": f"View CR #{cr_id}", "emoji": True},
                "url": cr_link,
            }],
        },
    ]


class SlackNotifier:
    """Stateless notifier over the Slack gateway."""

    def __init__(self, gateway=None):
        self.gateway = gateway or slack_gateway

    def send_change_request_notification(self, team, message: str, cr_id: int,
                                         budget_impact: int | None = None) -> bool:
        """
        Announce a new change request.

        Returns:
            True if every attempted post succeeded; False when disabled or
            any post was rejected.
        """
        cfg = current_app.config
        full_message = f":tada: New Change Request! :tada: {message}"
        cr_link = f"{cfg['FRONTEND_URL'].rstrip('/')}/cr/{cr_id}"
        token = cfg.get("SLACK_BOT_TOKEN")

        if not cfg.get("SLACK_NOTIFICATIONS_ENABLED") or not token:
            logger.info("Slack disabled, skipping CR #%s notification: %s", cr_id, message,
                        extra={"cr_id": cr_id, "channel": team.slack_id})
            return False

        blocks = build_change_request_blocks(full_message, cr_link, cr_id)
        result = self.gateway.post_message(token, team.slack_id, full_message, blocks=blocks)
        ok = result.ok

        eboard = cfg.get("SLACK_EBOARD_CHANNEL")
        threshold = cfg.get("SLACK_BUDGET_ALERT_THRESHOLD", 100)
        if eboard and budget_impact is not None and budget_impact > threshold:
            budget_message = f"{full_message} with ${budget_impact} requested"
            eboard_result = self.gateway.post_message(
                token, eboard, budget_message,
                blocks=build_change_request_blocks(budget_message, cr_link, cr_id),
            )
            ok = ok and eboard_result.ok

        logger.info("CR #%s notification sent ok=%s", cr_id, ok,
                    extra={"cr_id": cr_id, "channel": team.slack_id})
        return ok


# Module-level singleton
slack_notifier = SlackNotifier()
