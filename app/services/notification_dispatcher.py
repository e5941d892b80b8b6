from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Sequence, Tuple

from app.models.items import NotificationRequest
from app.scripts.logging_config import get_logger, log_match_event
from . import firestore_store

logger = get_logger("matching")

Enqueue = Callable[[Dict], str]


@dataclass
class DispatchReport:
    queued: List[str] = field(default_factory=list)  # recipients
    failed: List[Tuple[str, str]] = field(default_factory=list)  # (recipient, error)

    @property
    def ok(self) -> bool:
        return not self.failed


def to_mail_record(request: NotificationRequest) -> Dict:
    return {
        "to": request.recipient,
        "message": {
            "subject": request.subject,
            "html": request.body,
        },
    }


async def dispatch(requests: Sequence[NotificationRequest], enqueue: Optional[Enqueue] = None) -> DispatchReport:
    """Queue every request concurrently and wait for all of them.

    A failed enqueue is recorded in the report and logged; it never cancels
    the others and is not re-raised.
    """
    report = DispatchReport()
    if not requests:
        return report
    enqueue = enqueue or firestore_store.enqueue_mail

    tasks = [asyncio.create_task(asyncio.to_thread(enqueue, to_mail_record(r))) for r in requests]
    results = await asyncio.gather(*tasks, return_exceptions=True)

    for req, res in zip(requests, results):
        if isinstance(res, BaseException):
            logger.error("mail_enqueue_failed to=%s err=%s", req.recipient, res)
            report.failed.append((req.recipient, str(res)))
        else:
            report.queued.append(req.recipient)

    log_match_event("dispatch_complete", {"queued": len(report.queued), "failed": len(report.failed)})
    if report.failed:
        logger.error("dispatch finished with failures queued=%d failed=%d", len(report.queued), len(report.failed))
    else:
        logger.info("Processed matches. Queued %d emails.", len(report.queued))
    return report
