#!/usr/bin/env python3
"""Tests for background email dispatch"""

import sys
import threading
sys.path.append('.')


def test_send_email_in_background_passes_fields():
    """The send callable gets the reference number plus every field"""
    from motorpool.services.background_tasks import send_email_in_background

    received = {}

    def send(**kwargs):
        received.update(kwargs)
        return True

    thread = send_email_in_background(
        send,
        "status",
        "RES-1",
        to_address="alice@example.com",
        status="APPROVED",
    )
    thread.join(timeout=2.0)

    assert thread.name == "email-status-RES-1"
    assert thread.daemon
    assert received == {"reference_number": "RES-1", "to_address": "alice@example.com", "status": "APPROVED"}
    print("[PASS] send_email_in_background passes fields test passed")


def test_send_email_in_background_contains_failures():
    """A failing or refused send never escapes the worker thread"""
    from motorpool.services.background_tasks import send_email_in_background

    def failing_send(**kwargs):
        raise ConnectionError("mail relay unreachable")

    def refused_send(**kwargs):
        return False

    for send in (failing_send, refused_send):
        thread = send_email_in_background(send, "confirmation", "RES-2", to_address="bob@example.com")
        thread.join(timeout=2.0)
        assert not thread.is_alive()
    print("[PASS] send_email_in_background contains failures test passed")


def test_notification_service_sends_email_in_background():
    """Status emails leave the request thread when background sending is on"""
    from reservation_fixtures import DAY1, add_reservation, seed_fleet, setup_in_memory_db
    from motorpool.services.notification_service import NotificationService

    SessionLocal = setup_in_memory_db()
    db = SessionLocal()
    try:
        seed_fleet(db)
        reservation = add_reservation(db, "r-1", DAY1, DAY1, status="APPROVED")

        sent = threading.Event()
        calls = {}

        class RecordingEmail:
            def is_configured(self):
                return True

            def send_reservation_status_email(self, **kwargs):
                calls["thread"] = threading.current_thread().name
                calls["kwargs"] = kwargs
                sent.set()
                return True

        service = NotificationService(db, email=RecordingEmail(), send_in_background=True)
        service.email_status(reservation, reason=None)

        assert sent.wait(timeout=2.0)
        assert calls["thread"] == "email-status-RES-r-1"
        assert calls["kwargs"]["to_address"] == "alice@example.com"
        assert calls["kwargs"]["reference_number"] == "RES-r-1"
        assert calls["kwargs"]["status"] == "APPROVED"
        print("[PASS] notification service sends email in background test passed")
    finally:
        db.close()


if __name__ == "__main__":
    print("Running background task tests...")
    print()

    test_send_email_in_background_passes_fields()
    test_send_email_in_background_contains_failures()
    test_notification_service_sends_email_in_background()

    print()
    print("[SUCCESS] All background task tests passed!")
