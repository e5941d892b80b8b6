"""Match one found item against the standing lost alerts.

1. A found item without an embedding is not matchable: nothing is loaded.
2. Load the whole alert registry (linear scan, capped by MAX_ALERTS_PER_PASS).
3. Score every alert that carries an embedding with cosine similarity.
4. Keep alerts whose score is strictly greater than MATCH_THRESHOLD.
5. Build one NotificationRequest per kept alert.

No writes happen here; queueing the mails is the dispatcher's job.
"""
from __future__ import annotations
from typing import Callable, Dict, Iterable, List, Optional

from pydantic import ValidationError as SchemaError

from config import settings
from app.domain.errors import EvaluationError
from app.models.items import FoundItem, LostAlert, MatchResult, NotificationRequest
from app.scripts.logging_config import get_logger, log_match_event
from . import firestore_store
from .mail_template import MATCH_SUBJECT, confidence_percent, render_match_email
from .similarity import cosine_similarity

logger = get_logger("matching")

AlertLoader = Callable[[Optional[int]], List[Dict]]


def parse_alerts(raw_alerts: Iterable[Dict]) -> List[LostAlert]:
    alerts: List[LostAlert] = []
    for raw in raw_alerts:
        try:
            alerts.append(LostAlert.model_validate(raw))
        except SchemaError as e:
            # one bad document must not sink the pass
            logger.warning("alert_skipped_invalid id=%s err=%s", (raw or {}).get("id"), e.errors()[:1])
    return alerts


def find_matches(found_item: FoundItem, alerts: Iterable[LostAlert], threshold: Optional[float] = None) -> List[MatchResult]:
    if threshold is None:
        threshold = settings.MATCH_THRESHOLD
    matches: List[MatchResult] = []
    for alert in alerts:
        if not alert.embedding:
            continue
        score = cosine_similarity(found_item.embedding, alert.embedding)
        if score > threshold:
            logger.info("match_found alert=%s item=%s score=%.1f%%", alert.id, found_item.id, score * 100)
            matches.append(MatchResult(alert=alert, found_item=found_item, score=score))
    return matches


def build_notification(match: MatchResult) -> Optional[NotificationRequest]:
    if not match.alert.email:
        logger.warning("match_without_email alert=%s item=%s", match.alert.id, match.found_item.id)
        return None
    return NotificationRequest(
        recipient=match.alert.email,
        subject=MATCH_SUBJECT,
        body=render_match_email(match),
    )


def evaluate_found_item(found_item: FoundItem, load_alerts: Optional[AlertLoader] = None) -> List[NotificationRequest]:
    """Run one match pass. Raises EvaluationError when the alert set cannot be loaded."""
    if not found_item.embedding:
        logger.info("match_pass_skipped item=%s reason=no_embedding", found_item.id)
        return []

    load_alerts = load_alerts or firestore_store.list_lost_alerts
    limit = settings.MAX_ALERTS_PER_PASS
    try:
        raw_alerts = load_alerts(limit)
    except Exception as e:
        logger.exception("alert_load_failed item=%s", found_item.id)
        raise EvaluationError(f"failed to load lost alerts: {e}") from e

    if limit and len(raw_alerts) >= limit:
        logger.warning("alert_scan_capped item=%s limit=%d", found_item.id, limit)
    if not raw_alerts:
        logger.info("No lost alerts to check. item=%s", found_item.id)
        return []

    alerts = parse_alerts(raw_alerts)
    matches = find_matches(found_item, alerts)
    requests = [r for r in (build_notification(m) for m in matches) if r is not None]
    log_match_event("match_pass_complete", {
        "item_id": found_item.id,
        "alerts_checked": len(alerts),
        "matched": len(matches),
        "notifications": len(requests),
        "top_scores": [confidence_percent(m.score) for m in sorted(matches, key=lambda m: m.score, reverse=True)[:5]],
    })
    return requests
