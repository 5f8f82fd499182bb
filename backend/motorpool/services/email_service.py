"""
Email Service using an HTTP-triggered mail flow.

The flow (Power Automate, Logic Apps or any relay accepting JSON) does the
actual delivery. Sending is best effort: every failure is logged and
reported as ``False``, never raised to the reservation workflow.
"""

import html
import logging
from datetime import datetime
from typing import Optional

import httpx

from motorpool.config import settings
from motorpool.models.reservation import ReservationStatus

logger = logging.getLogger(__name__)

STATUS_COLORS = {
    "APPROVED": "#22c55e",
    "REJECTED": "#ef4444",
    "CANCELLED": "#6b7280",
    "IN_PROGRESS": "#2563eb",
    "COMPLETED": "#0f766e",
}


def _format_datetime(value: Optional[datetime]) -> str:
    if value is None:
        return "-"
    return value.strftime("%A %d %B %Y %H:%M")


class EmailService:
    """Service for sending reservation emails via an HTTP mail flow."""

    def __init__(self, client: Optional[httpx.Client] = None):
        self.enabled = settings.email_enabled
        self.flow_url = settings.email_flow_url
        self.from_name = settings.email_from_name
        self.timeout = settings.email_timeout_seconds
        self._client = client

    def is_configured(self) -> bool:
        """Check if email sending is properly configured."""
        return bool(self.enabled and self.flow_url)

    def send_email(
        self,
        to_address: str,
        subject: str,
        body_html: str,
        body_text: Optional[str] = None,
    ) -> bool:
        """
        Send an email via the configured flow.

        Args:
            to_address: Recipient email address
            subject: Email subject
            body_html: HTML body content
            body_text: Optional plain text body (fallback)

        Returns:
            True if email sent successfully, False otherwise
        """
        if not self.enabled:
            logger.info("Email delivery is disabled")
            return False

        if not self.flow_url:
            logger.warning("Email flow URL not configured")
            return False

        payload = {
            "to": to_address,
            "subject": subject,
            "bodyHtml": body_html,
            "bodyText": body_text or "",
            "fromName": self.from_name,
        }

        try:
            if self._client is not None:
                response = self._client.post(self.flow_url, json=payload)
            else:
                with httpx.Client(timeout=self.timeout) as client:
                    response = client.post(
                        self.flow_url,
                        json=payload,
                        headers={"Content-Type": "application/json"}
                    )

            if response.status_code in (200, 202):
                logger.info(f"Email sent successfully to {to_address}")
                return True

            logger.error(f"Email flow returned {response.status_code}: {response.text}")
            return False

        except httpx.TimeoutException:
            logger.error(f"Timeout sending email to {to_address}")
            return False
        except httpx.RequestError as e:
            logger.error(f"Error sending email: {e}")
            return False

    def send_reservation_confirmation_email(
        self,
        to_address: str,
        recipient_name: str,
        reference_number: str,
        vehicle_name: str,
        start_time: datetime,
        end_time: datetime,
        destination: Optional[str] = None,
    ) -> bool:
        """Tell the requester their reservation was recorded and awaits approval."""
        name = html.escape(recipient_name or to_address)
        body_html = f"""
        <html>
        <body style="font-family: Arial, sans-serif; color: #333;">
            <h2>Reservation received</h2>
            <p>Hello {name},</p>
            <p>Your reservation has been created and is awaiting approval.</p>
            <table>
                <tr><td><strong>Reference:</strong></td><td>{html.escape(reference_number)}</td></tr>
                <tr><td><strong>Vehicle:</strong></td><td>{html.escape(vehicle_name)}</td></tr>
                <tr><td><strong>Start:</strong></td><td>{_format_datetime(start_time)}</td></tr>
                <tr><td><strong>End:</strong></td><td>{_format_datetime(end_time)}</td></tr>
                <tr><td><strong>Destination:</strong></td><td>{html.escape(destination or "-")}</td></tr>
            </table>
            <p>You will be notified as soon as it is reviewed.</p>
        </body>
        </html>
        """
        body_text = (
            f"Hello {recipient_name or to_address},\n\n"
            f"Your reservation {reference_number} for {vehicle_name} "
            f"({_format_datetime(start_time)} - {_format_datetime(end_time)}) is awaiting approval."
        )
        return self.send_email(
            to_address=to_address,
            subject=f"Reservation created - {reference_number}",
            body_html=body_html,
            body_text=body_text,
        )

    def send_reservation_status_email(
        self,
        to_address: str,
        recipient_name: str,
        reference_number: str,
        status: str,
        reason: Optional[str] = None,
    ) -> bool:
        """Tell the requester their reservation changed status."""
        color = STATUS_COLORS.get(status, "#333333")
        label = ReservationStatus(status).display_name
        reason_html = f"<p><strong>Reason:</strong> {html.escape(reason)}</p>" if reason else ""
        body_html = f"""
        <html>
        <body style="font-family: Arial, sans-serif; color: #333;">
            <h2 style="color: {color};">Reservation {html.escape(label)}</h2>
            <p>Hello {html.escape(recipient_name or to_address)},</p>
            <p>Your reservation <strong>{html.escape(reference_number)}</strong> is now
            <strong style="color: {color};">{html.escape(label)}</strong>.</p>
            {reason_html}
        </body>
        </html>
        """
        body_text = f"Your reservation {reference_number} is now {label}."
        if reason:
            body_text += f"\nReason: {reason}"
        return self.send_email(
            to_address=to_address,
            subject=f"Reservation {label} - {reference_number}",
            body_html=body_html,
            body_text=body_text,
        )


email_service = EmailService()
