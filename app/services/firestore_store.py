from typing import Dict, List, Optional

from firebase_admin import firestore

from config import settings
from app.scripts.logging_config import get_logger

logger = get_logger("firestore_store")

_db = None

def get_db():
    global _db
    if _db is None:
        _db = firestore.client()
    return _db

# Firestore structure (owned by the app / ingestion path, read-only here except mail)
# found_items/{item_id}  { description, embedding, imageUrl }
# lost_alerts/{alert_id} { email, description, embedding }
# mail/{auto_id}         { to, message: { subject, html } }


def list_lost_alerts(limit: Optional[int] = None) -> List[Dict]:
    """Full scan of the alert registry, capped at ``limit`` documents."""
    query = get_db().collection(settings.LOST_ALERTS_COLLECTION)
    if limit:
        query = query.limit(limit)
    out: List[Dict] = []
    for doc in query.stream():
        data = doc.to_dict() or {}
        data['id'] = doc.id
        out.append(data)
    logger.info("firestore.read collection=%s docs=%d limit=%s", settings.LOST_ALERTS_COLLECTION, len(out), limit)
    return out


def get_found_item(item_id: str) -> Optional[Dict]:
    snap = get_db().collection(settings.FOUND_ITEMS_COLLECTION).document(item_id).get()
    if not snap.exists:
        return None
    data = snap.to_dict() or {}
    data['id'] = item_id
    return data


def enqueue_mail(record: Dict) -> str:
    """Write one outbound message for the mail extension; returns the new doc id."""
    _, ref = get_db().collection(settings.MAIL_COLLECTION).add(record)
    logger.info("firestore.write op=add collection=%s doc=%s to=%s", settings.MAIL_COLLECTION, ref.id, record.get("to"))
    return ref.id
