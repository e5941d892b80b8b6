"""Re-run the match pass for an existing found item.

The Firestore trigger only fires on creation. Use this after a threshold change
or a failed trigger run:

    python -m app.scripts.match_found_item --item-id <found_item_id>
    python -m app.scripts.match_found_item --item-id <found_item_id> --dry-run

--dry-run prints the matching alerts and queues no mail. Notifications are not
de-duplicated, so a real run mails every matching alert again.
"""
from __future__ import annotations
import argparse
import asyncio
import sys

from pydantic import ValidationError as SchemaError

from app.models.items import FoundItem
from app.services import firestore_store, ingress, match_evaluator
from app.services.firebase_init import init_firebase
from app.services.mail_template import confidence_percent
from app.scripts.logging_config import get_logger, setup_logging
from config import settings

logger = get_logger("matching")


def dry_run(found_item: FoundItem) -> int:
    alerts = match_evaluator.parse_alerts(firestore_store.list_lost_alerts(settings.MAX_ALERTS_PER_PASS))
    matches = match_evaluator.find_matches(found_item, alerts)
    for m in sorted(matches, key=lambda m: m.score, reverse=True):
        print(f"{m.alert.id}\t{m.alert.email or '-'}\t{confidence_percent(m.score)}%")
    print(f"[RESULT] alerts={len(alerts)} matches={len(matches)} threshold={settings.MATCH_THRESHOLD}")
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Re-run lost-alert matching for one found item")
    parser.add_argument("--item-id", required=True, help="found_items document id")
    parser.add_argument("--dry-run", action="store_true", help="print matches without queueing mail")
    parser.add_argument("--threshold", type=float, default=None, help="override MATCH_THRESHOLD for this run")
    args = parser.parse_args(argv)

    setup_logging(json_fmt=False)
    if not init_firebase():
        print("[ERROR] Firebase credentials not configured", file=sys.stderr)
        return 2
    if args.threshold is not None:
        settings.MATCH_THRESHOLD = args.threshold

    data = firestore_store.get_found_item(args.item_id)
    if data is None:
        print(f"[ERROR] found item not found: {args.item_id}", file=sys.stderr)
        return 1
    try:
        found_item = FoundItem.model_validate(data)
    except SchemaError as e:
        print(f"[ERROR] invalid found item record {args.item_id}: {e.errors()[:1]}", file=sys.stderr)
        return 1
    if not found_item.embedding:
        print(f"[SKIP] found item has no embedding: {args.item_id}")
        return 0

    if args.dry_run:
        return dry_run(found_item)

    report = asyncio.run(ingress.on_found_item_created(args.item_id, data))
    print(f"[RESULT] notifications={report.notifications} queued={report.queued} "
          f"failed={len(report.failed)} error={report.error}")
    return 1 if report.error or report.failed else 0


if __name__ == "__main__":
    sys.exit(main())
