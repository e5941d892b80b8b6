import importlib.util
import json
from pathlib import Path
from types import SimpleNamespace

import firebase_admin
import pytest

from config import settings
from app.domain.errors import UpstreamError
from app.models.matching import ImageUrlRequest, TextRequest
from app.scripts import logging_config
from app.services import embeddings, ingress

FUNCTIONS_MAIN = Path(__file__).resolve().parents[1] / "firebase_function" / "functions" / "main.py"


@pytest.fixture
def functions(monkeypatch):
    monkeypatch.setattr(firebase_admin, "initialize_app", lambda *a, **kw: None)
    monkeypatch.setattr(logging_config, "setup_logging", lambda *a, **kw: None)
    spec = importlib.util.spec_from_file_location("functions_main", FUNCTIONS_MAIN)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


class FakeRequest:
    def __init__(self, payload):
        self.payload = payload

    def get_json(self, silent=False):
        return self.payload


def _body(resp):
    return json.loads(resp.get_data(as_text=True))


def test_missing_field_is_a_client_error(functions):
    resp = functions._handle(FakeRequest({}), TextRequest, ingress.text_embedding)
    assert resp.status_code == 400
    assert _body(resp) == {"error": "text is required"}


def test_non_json_body_is_a_client_error(functions):
    # get_json(silent=True) yields None for an unparsable body
    resp = functions._handle(FakeRequest(None), ImageUrlRequest, ingress.image_embedding)
    assert resp.status_code == 400
    assert _body(resp) == {"error": "imageUrl is required"}


def test_wrong_type_names_the_field(functions):
    resp = functions._handle(FakeRequest({"text": ["a", "b"]}), TextRequest, ingress.text_embedding)
    assert resp.status_code == 400
    assert _body(resp)["error"].startswith("text:")


def test_upstream_failure_is_a_server_error(functions, monkeypatch):
    def embed_text(text):
        raise UpstreamError("embedding generation failed: quota")

    monkeypatch.setattr(embeddings, "embed_text", embed_text)
    resp = functions._handle(FakeRequest({"text": "keys"}), TextRequest, ingress.text_embedding)
    assert resp.status_code == 500
    assert _body(resp) == {"error": "embedding generation failed: quota"}


def test_success_returns_the_response_model(functions, echo_llm):
    resp = functions._handle(FakeRequest({"text": "red scarf"}), TextRequest, ingress.text_embedding)
    assert resp.status_code == 200
    assert _body(resp) == {"embedding": echo_llm.embed_text("red scarf")}


def test_platform_timeout_exceeds_internal_deadlines(functions):
    assert functions._TEXT_TIMEOUT > settings.TEXT_REQUEST_TIMEOUT
    assert functions._IMAGE_TIMEOUT > settings.IMAGE_REQUEST_TIMEOUT


def _trigger(functions):
    return functions.check_matches_on_upload.__wrapped__


def test_trigger_without_snapshot_is_a_no_op(functions, monkeypatch):
    calls = []

    async def on_created(item_id, data):
        calls.append(item_id)

    monkeypatch.setattr(ingress, "on_found_item_created", on_created)
    _trigger(functions)(SimpleNamespace(data=None, params={"itemId": "f1"}))
    assert calls == []


def test_trigger_passes_item_id_and_document(functions, monkeypatch):
    calls = []

    async def on_created(item_id, data):
        calls.append((item_id, data))
        return ingress.TriggerReport(item_id=item_id, notifications=1, queued=1)

    monkeypatch.setattr(ingress, "on_found_item_created", on_created)
    doc = {"description": "umbrella", "embedding": [1.0, 0.0]}
    snapshot = SimpleNamespace(to_dict=lambda: dict(doc))
    _trigger(functions)(SimpleNamespace(data=snapshot, params={"itemId": "f1"}))
    assert calls == [("f1", doc)]
