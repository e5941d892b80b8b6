import asyncio
import json

from firebase_functions import firestore_fn, https_fn, options
from firebase_admin import initialize_app
from pydantic import BaseModel, ValidationError as SchemaError

from config import settings
from app.models.matching import ImageUrlRequest, TextRequest
from app.services import ingress
from app.scripts.logging_config import get_logger, setup_logging

# the functions filesystem is read-only: console logging only
setup_logging(json_fmt=True, to_files=False)
logger = get_logger("functions")

initialize_app()

_CORS = options.CorsOptions(cors_origins="*", cors_methods=["post"])
_SECRETS = ["OPENAI_API_KEY"]
_TEXT_TIMEOUT = int(settings.TEXT_REQUEST_TIMEOUT) + settings.FUNCTION_TIMEOUT_MARGIN
_IMAGE_TIMEOUT = int(settings.IMAGE_REQUEST_TIMEOUT) + settings.FUNCTION_TIMEOUT_MARGIN


def _json(status: int, body: dict) -> https_fn.Response:
    return https_fn.Response(json.dumps(body), status=status, mimetype="application/json")


def _handle(req: https_fn.Request, model: type[BaseModel], op) -> https_fn.Response:
    payload = req.get_json(silent=True) or {}
    try:
        body = model.model_validate(payload)
    except SchemaError as e:
        return _json(400, {"error": ingress.schema_error_message(e.errors())})
    try:
        result = asyncio.run(op(body))
    except Exception as e:
        status = ingress.error_status(e)
        logger.error("%s failed status=%d err=%s", op.__name__, status, e)
        return _json(status, {"error": str(e)})
    return _json(200, result.model_dump())


@https_fn.on_request(cors=_CORS, timeout_sec=_IMAGE_TIMEOUT, secrets=_SECRETS)
def get_image_description(req: https_fn.Request) -> https_fn.Response:
    return _handle(req, ImageUrlRequest, ingress.describe_image_from_url)


@https_fn.on_request(cors=_CORS, timeout_sec=_TEXT_TIMEOUT, secrets=_SECRETS)
def get_text_embedding(req: https_fn.Request) -> https_fn.Response:
    return _handle(req, TextRequest, ingress.text_embedding)


@https_fn.on_request(cors=_CORS, timeout_sec=_IMAGE_TIMEOUT, secrets=_SECRETS)
def get_image_embedding(req: https_fn.Request) -> https_fn.Response:
    return _handle(req, ImageUrlRequest, ingress.image_embedding)


# runs whenever a NEW document is created in found_items
@firestore_fn.on_document_created(document=f"{settings.FOUND_ITEMS_COLLECTION}/{{itemId}}")
def check_matches_on_upload(event: firestore_fn.Event[firestore_fn.DocumentSnapshot | None]) -> None:
    snapshot = event.data
    if snapshot is None:
        return
    report = asyncio.run(ingress.on_found_item_created(event.params["itemId"], snapshot.to_dict()))
    logger.info("match trigger done item=%s queued=%d failed=%d error=%s",
                report.item_id, report.queued, len(report.failed), report.error)
