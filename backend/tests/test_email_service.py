#!/usr/bin/env python3
"""Tests for the HTTP mail flow client"""

import json
import sys
sys.path.append('.')

import httpx

from motorpool.services.email_service import EmailService


def _service(handler) -> EmailService:
    service = EmailService(client=httpx.Client(transport=httpx.MockTransport(handler)))
    service.enabled = True
    service.flow_url = "https://flow.example.com/send"
    return service


def test_disabled_service_does_not_send():
    service = EmailService()
    service.enabled = False
    assert not service.is_configured()
    assert service.send_email("alice@example.com", "Hi", "<p>Hi</p>") is False
    print("[PASS] disabled service test passed")


def test_status_email_payload():
    captured = {}

    def handler(request: httpx.Request) -> httpx.Response:
        captured["url"] = str(request.url)
        captured["payload"] = json.loads(request.content)
        return httpx.Response(202)

    service = _service(handler)
    assert service.send_reservation_status_email(
        to_address="alice@example.com",
        recipient_name="Alice <Ops>",
        reference_number="RES-ABC-123456",
        status="REJECTED",
        reason="Vehicle in service",
    )

    payload = captured["payload"]
    assert captured["url"] == "https://flow.example.com/send"
    assert payload["to"] == "alice@example.com"
    assert payload["subject"] == "Reservation Rejected - RES-ABC-123456"
    assert "Alice &lt;Ops&gt;" in payload["bodyHtml"]
    assert "Reason: Vehicle in service" in payload["bodyText"]
    print("[PASS] status email payload test passed")


def test_flow_errors_return_false():
    def server_error(request):
        return httpx.Response(500, text="flow failed")

    def unreachable(request):
        raise httpx.ConnectError("connection refused", request=request)

    def slow(request):
        raise httpx.ReadTimeout("timed out", request=request)

    for handler in (server_error, unreachable, slow):
        assert _service(handler).send_email("alice@example.com", "Hi", "<p>Hi</p>") is False
    print("[PASS] flow errors return False test passed")


if __name__ == "__main__":
    print("Running email service tests...")
    print()

    test_disabled_service_does_not_send()
    test_status_email_payload()
    test_flow_errors_return_false()

    print()
    print("[SUCCESS] All tests passed!")
