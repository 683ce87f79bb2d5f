"""Data models for the digest module."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Optional


@dataclass(frozen=True)
class MessageBody:
    """A rendered summary ready for the mail transport.

    Attributes:
        subject: Email subject line.
        html: Self-contained HTML body (inline styles only).
        text: Plain text alternative of the same content.
    """

    subject: str
    html: str
    text: str = ""

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary."""
        return {"subject": self.subject, "html": self.html, "text": self.text}


@dataclass
class DeliveryResult:
    """Result of handing a summary to the mail transport.

    Attributes:
        delivered_at: When delivery was attempted.
        recipient: Who the summary was sent to.
        subject: Subject line of the sent message.
        sent: Whether the transport accepted the message.
        message_id: Transport message ID (if the transport returns one).
        duration_seconds: How long the transport call took.
    """

    recipient: str
    subject: str
    delivered_at: datetime = field(default_factory=datetime.now)
    sent: bool = False
    message_id: Optional[str] = None
    duration_seconds: float = 0.0

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary."""
        return {
            "delivered_at": self.delivered_at.isoformat(),
            "recipient": self.recipient,
            "subject": self.subject,
            "sent": self.sent,
            "message_id": self.message_id,
            "duration_seconds": self.duration_seconds,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "DeliveryResult":
        """Deserialize from dictionary."""
        return cls(
            delivered_at=datetime.fromisoformat(data["delivered_at"]),
            recipient=data.get("recipient", ""),
            subject=data.get("subject", ""),
            sent=data.get("sent", False),
            message_id=data.get("message_id"),
            duration_seconds=data.get("duration_seconds", 0.0),
        )
