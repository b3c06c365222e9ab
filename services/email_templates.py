"""Email content for waitlist notifications."""

from dataclasses import dataclass

import config


@dataclass(frozen=True)
class EmailContent:
    subject: str
    text: str
    html: str


def build_lead_magnet_email(email: str, waitlist: str) -> EmailContent:
    """Render the lead-magnet delivery email for a signup."""
    link = config.settings.LEAD_MAGNET_URL
    subject = "Your guide: 10 powerful Shopify automations"
    text = (
        "Thanks for joining!\n\n"
        "Here is the guide with all 10 Shopify automations you asked for:\n"
        f"{link}\n\n"
        f"You received this because {email} signed up on our {waitlist} list."
    )
    html = (
        "<p>Thanks for joining!</p>"
        "<p>Here is the guide with all 10 Shopify automations you asked for:</p>"
        f'<p><a href="{link}">Download the guide</a></p>'
        f'<p style="color:#888;font-size:12px">You received this because {email} '
        f"signed up on our {waitlist} list.</p>"
    )
    return EmailContent(subject=subject, text=text, html=html)
