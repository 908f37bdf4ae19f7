"""Welcome email content.

Only the variant selection and a compact HTML body live here; campaign-grade
templates are managed in the email provider.
"""

from __future__ import annotations

from dataclasses import dataclass
from html import escape

EARLY_BIRD_SUBJECT = "You're in the First 100! - Vendra Waitlist"
STANDARD_SUBJECT = "Welcome to Vendra!"

EARLY_BIRD_PERK = (
    "You're in the first 100! You've earned 3 months of Pro tier FREE when we launch."
)
STANDARD_PERK = "Thank you for joining! We'll keep you updated on our launch progress."


@dataclass(frozen=True)
class WelcomeMessage:
    """Rendered welcome email."""

    subject: str
    html: str
    early_bird: bool


def is_early_bird(position: int, threshold: int = 100) -> bool:
    """Return True when ``position`` qualifies for the early-bird variant."""
    return position <= threshold


def build_welcome_message(position: int, *, early_bird_threshold: int = 100) -> WelcomeMessage:
    """Render the welcome email for a waitlist position.

    Args:
        position: 1-based waitlist position.
        early_bird_threshold: Highest position that still gets the early-bird perk.

    Returns:
        WelcomeMessage with subject, HTML body and the selected variant.
    """
    early_bird = is_early_bird(position, early_bird_threshold)
    subject = EARLY_BIRD_SUBJECT if early_bird else STANDARD_SUBJECT
    perk = EARLY_BIRD_PERK if early_bird else STANDARD_PERK

    html = f"""<!DOCTYPE html>
<html>
  <body style="font-family: Inter, sans-serif; line-height: 1.6; color: #1a1a1a;">
    <h1>Welcome to Vendra</h1>
    <p>Africa's Trust Layer for Social Commerce</p>
    <p>Thank you for joining the Vendra waitlist.</p>
    <p><strong>{escape(perk)}</strong></p>
    <p>Your position: <strong>{position}</strong></p>
    <p>Have questions? Just reply to this email. We read every message.</p>
    <p>The Vendra Team</p>
  </body>
</html>
"""
    return WelcomeMessage(subject=subject, html=html, early_bird=early_bird)
