"""HTML body for the "potential match" e-mail."""
from __future__ import annotations
import math
from html import escape

from app.models.items import MatchResult

MATCH_SUBJECT = "We found a potential match for your lost item!"


def confidence_percent(score: float) -> int:
    # half rounds up: 0.625 -> 63
    return int(math.floor(score * 100 + 0.5))


def render_match_email(match: MatchResult) -> str:
    alert = match.alert
    item = match.found_item
    image_block = ""
    if item.image_url:
        image_block = (
            f'<img src="{escape(item.image_url, quote=True)}" width="300" '
            f'style="border-radius: 8px; margin-top: 10px;" />'
        )
    return f"""
<div style="font-family: Arial, sans-serif; padding: 20px; background-color: #f9f9f9; border-radius: 10px;">
    <h2 style="color: #2563EB;">Finder AI Match Alert</h2>
    <p>Good news! An item was just uploaded that matches the description of what you lost.</p>

    <div style="background-color: white; padding: 15px; border-radius: 8px; border: 1px solid #ddd; margin: 20px 0;">
        <p><strong>Your Search:</strong> "{escape(alert.description)}"</p>
        <p><strong>Match Confidence:</strong> <span style="color: #10B981; font-weight: bold;">{confidence_percent(match.score)}%</span></p>
    </div>

    <p><strong>Item Description:</strong> {escape(item.description)}</p>

    {image_block}

    <br/><br/>
    <p>Check the App for more details.</p>
</div>
""".strip()
