"""
Background delivery for reservation emails.

The mail flow is an external HTTP endpoint that can be slow or down, so
requests hand each message to a daemon thread and return without waiting.
A failed send is logged and dropped; the reservation it describes is
already committed.
"""

import logging
import threading
from typing import Callable

logger = logging.getLogger(__name__)


def send_email_in_background(
    send: Callable[..., bool],
    kind: str,
    reference_number: str,
    **fields,
) -> threading.Thread:
    """
    Deliver one reservation email on a daemon thread.

    Args:
        send: ``EmailService`` method that posts the message and returns
            whether the flow accepted it
        kind: Message kind used in the thread name and log lines
            (``confirmation``, ``status``)
        reference_number: Reservation the email is about
        **fields: Keyword arguments for ``send``

    Returns:
        The started thread, named ``email-<kind>-<reference_number>``
    """
    label = f"{kind} email for {reference_number}"

    def deliver():
        try:
            delivered = send(reference_number=reference_number, **fields)
        except Exception as e:
            logger.error(f"[Email] {label} failed: {e}", exc_info=True)
            return
        if delivered:
            logger.debug(f"[Email] {label} delivered")
        else:
            logger.warning(f"[Email] {label} was not accepted by the mail flow")

    thread = threading.Thread(target=deliver, name=f"email-{kind}-{reference_number}", daemon=True)
    thread.start()
    logger.debug(f"[Email] {label} dispatched")
    return thread
