import asyncio
import threading

from app.models.items import FoundItem, LostAlert, MatchResult, NotificationRequest
from app.services import notification_dispatcher as nd
from app.services.mail_template import confidence_percent, render_match_email


def _req(to):
    return NotificationRequest(recipient=to, subject="match", body="<p>hi</p>")


def test_mail_record_shape():
    assert nd.to_mail_record(_req("a@example.com")) == {
        "to": "a@example.com",
        "message": {"subject": "match", "html": "<p>hi</p>"},
    }


def test_one_failure_does_not_block_siblings(make_mail_sink):
    sink = make_mail_sink(fail_for={"b@example.com"})
    reqs = [_req("a@example.com"), _req("b@example.com"), _req("c@example.com")]

    report = asyncio.run(nd.dispatch(reqs, enqueue=sink))

    assert sorted(report.queued) == ["a@example.com", "c@example.com"]
    assert len(report.failed) == 1
    recipient, err = report.failed[0]
    assert recipient == "b@example.com"
    assert "quota exceeded" in err
    assert not report.ok
    assert sink.recipients == {"a@example.com", "c@example.com"}


def test_enqueues_run_concurrently(mail_sink):
    # every enqueue blocks until all three are in flight at once
    barrier = threading.Barrier(3, timeout=5)

    def enqueue(record):
        barrier.wait()
        return mail_sink(record)

    reqs = [_req(f"{i}@example.com") for i in range(3)]
    report = asyncio.run(nd.dispatch(reqs, enqueue=enqueue))

    assert report.ok
    assert len(report.queued) == 3


def test_empty_request_list_touches_nothing():
    def enqueue(record):
        raise AssertionError("should not be called")

    report = asyncio.run(nd.dispatch([], enqueue=enqueue))
    assert report.queued == [] and report.failed == []


def test_template_escapes_user_text_and_optional_image():
    found = FoundItem(id="f1", description="<script>alert(1)</script>", embedding=[1.0])
    alert = LostAlert(id="a1", email="x@example.com", description='blue "Nike" bag', embedding=[1.0])
    html = render_match_email(MatchResult(alert=alert, found_item=found, score=0.734))

    assert "<script>" not in html
    assert "&lt;script&gt;" in html
    assert "blue &quot;Nike&quot; bag" in html
    assert "73%" in html
    assert "<img" not in html

    found_with_image = found.model_copy(update={"image_url": "https://cdn.example.com/a.jpg"})
    html = render_match_email(MatchResult(alert=alert, found_item=found_with_image, score=0.734))
    assert '<img src="https://cdn.example.com/a.jpg"' in html


def test_confidence_is_integer_percent():
    assert confidence_percent(0.6049) == 60
    assert confidence_percent(0.999) == 100


def test_confidence_rounds_half_up():
    assert confidence_percent(0.625) == 63
    assert confidence_percent(0.125) == 13
    assert confidence_percent(0.874) == 87
