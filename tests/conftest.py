import io
import threading

import pytest
from PIL import Image

from app.services import llm_providers
from app.services.llm_providers import EchoProvider


@pytest.fixture
def echo_llm(monkeypatch):
    provider = EchoProvider(dim=8)
    monkeypatch.setattr(llm_providers, "_singleton", provider)
    return provider


@pytest.fixture
def png_bytes():
    buf = io.BytesIO()
    Image.new("RGB", (4, 4), (200, 30, 30)).save(buf, format="PNG")
    return buf.getvalue()


class MailSink:
    """Stands in for the mail collection; safe to call from worker threads."""

    def __init__(self, fail_for=()):
        self.records = []
        self.fail_for = set(fail_for)
        self._lock = threading.Lock()

    def __call__(self, record):
        if record["to"] in self.fail_for:
            raise RuntimeError(f"quota exceeded for {record['to']}")
        with self._lock:
            self.records.append(record)
            return f"mail_{len(self.records)}"

    @property
    def recipients(self):
        return {r["to"] for r in self.records}


@pytest.fixture
def mail_sink():
    return MailSink()


@pytest.fixture
def make_mail_sink():
    return MailSink
