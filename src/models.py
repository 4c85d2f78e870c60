"""
Data Model for Phish-Lens

Immutable snapshots passed through an analysis run: the email metadata taken
when a run starts and the validated verdict produced at its end.
"""

from collections import OrderedDict
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple


@dataclass(frozen=True)
class EmailMetadata:
    """Snapshot of the selected item's metadata, taken at analysis start."""

    sender: Optional[str]
    subject: str
    has_attachments: bool = False

    @classmethod
    def from_item(cls, item) -> "EmailMetadata":
        """Build a snapshot from a mail item (see email_processor.MailItem)"""
        return cls(
            sender=item.sender_address or None,
            subject=item.subject or "",
            has_attachments=len(item.attachments) > 0,
        )

    def to_dict(self) -> Dict:
        """Canonical serialization with a stable key order; absent sender is omitted"""
        data = OrderedDict()
        if self.sender is not None:
            data["sender"] = self.sender
        data["subject"] = self.subject
        data["hasAttachments"] = self.has_attachments
        return data


@dataclass(frozen=True)
class Verdict:
    """
    Validated result of an analysis.

    Only ever constructed by risk_assessment.validate_verdict, so the field
    types and ranges are guaranteed.
    """

    confidence: int
    elements: Tuple[str, ...]
    reasoning: str

    def to_dict(self) -> Dict:
        return {
            "confidence": self.confidence,
            "elements": list(self.elements),
            "reasoning": self.reasoning,
        }

    @property
    def has_elements(self) -> bool:
        return len(self.elements) > 0

    def element_list(self) -> List[str]:
        return list(self.elements)
