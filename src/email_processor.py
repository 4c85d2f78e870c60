"""
Email Item Module for Phish-Lens

This module provides the mail items an analysis reads from: items parsed from
.eml content, items built from pasted plain text, and the Mailbox that tracks
the selected item and notifies listeners when the selection changes.
"""

import email.utils
import html
import re
from dataclasses import dataclass
from email.header import decode_header, make_header
from email.message import Message
from email.parser import BytesParser, Parser
from typing import Callable, List, Optional, Sequence

import chardet
from bs4 import BeautifulSoup

from error_handling import error_handler


BODY_SUCCEEDED = "succeeded"
BODY_FAILED = "failed"


@dataclass(frozen=True)
class BodyResult:
    """Result of reading an item body: the text and a retrieval status"""
    value: str
    status: str = BODY_SUCCEEDED
    error: Optional[str] = None

    @property
    def succeeded(self) -> bool:
        return self.status == BODY_SUCCEEDED


@dataclass(frozen=True)
class Attachment:
    filename: str
    content_type: str
    size: int = 0


class MailItem:
    """
    A selected email as seen by the analyzer.

    Subclasses provide the body through get_body(); sender, subject and
    attachments are plain attributes.
    """

    def __init__(self, sender_address: Optional[str], subject: str,
                 attachments: Sequence[Attachment] = ()):
        self.sender_address = sender_address
        self.subject = subject
        self.attachments = list(attachments)

    def get_body(self) -> BodyResult:
        raise NotImplementedError


class TextMailItem(MailItem):
    """Item built from pasted text with explicitly given metadata"""

    def __init__(self, body: str, sender_address: Optional[str] = None, subject: str = "",
                 attachments: Sequence[Attachment] = ()):
        super().__init__(sender_address, subject, attachments)
        self.body = body

    def get_body(self) -> BodyResult:
        return BodyResult(value=self.body)


class EmlMailItem(MailItem):
    """Item parsed from .eml content; body is None when no readable text part exists"""

    def __init__(self, sender_address: Optional[str], subject: str, body: Optional[str],
                 attachments: Sequence[Attachment] = ()):
        super().__init__(sender_address, subject, attachments)
        self.body = body

    def get_body(self) -> BodyResult:
        if self.body is None:
            return BodyResult(value="", status=BODY_FAILED, error="No readable text body")
        return BodyResult(value=self.body)


class EmailProcessor:
    """
    Parses raw .eml content into mail items.

    Text parts are decoded with their declared charset, falling back to
    chardet detection; HTML-only messages are converted to text with
    BeautifulSoup.
    """

    def __init__(self):
        self.parser = Parser()
        self.bytes_parser = BytesParser()

    def parse(self, content: str) -> EmlMailItem:
        """Parse .eml text into a mail item"""
        return self._build_item(self.parser.parsestr(content))

    def parse_bytes(self, data: bytes) -> EmlMailItem:
        """Parse an uploaded .eml file; parts are decoded with their own charsets"""
        return self._build_item(self.bytes_parser.parsebytes(data))

    def _build_item(self, msg: Message) -> EmlMailItem:
        return EmlMailItem(
            sender_address=self._extract_sender(msg),
            subject=self._clean_header_value(msg.get("Subject", "")),
            body=self._extract_body(msg),
            attachments=self._extract_attachments(msg),
        )

    def _decode_bytes(self, data: bytes, declared: Optional[str] = None) -> str:
        encoding = declared
        if not encoding:
            detected = chardet.detect(data)
            encoding = detected.get("encoding") or "utf-8"
        try:
            return data.decode(encoding, errors="replace")
        except LookupError:
            # Unknown charset label in the message headers
            if declared:
                return self._decode_bytes(data)
            return data.decode("utf-8", errors="replace")

    def _extract_sender(self, msg: Message) -> Optional[str]:
        _, address = email.utils.parseaddr(self._clean_header_value(msg.get("From", "")))
        return address or None

    def _extract_body(self, msg: Message) -> Optional[str]:
        """Prefer text/plain parts, fall back to text from text/html parts"""
        text_parts = []
        html_parts = []

        for part in msg.walk():
            if part.is_multipart() or self._is_attachment(part):
                continue
            content_type = part.get_content_type()
            if content_type == "text/plain":
                text_parts.append(self._get_payload(part))
            elif content_type == "text/html":
                html_parts.append(self._html_to_text(self._get_payload(part)))

        if text_parts:
            return self._normalize_text("\n".join(text_parts))
        if html_parts:
            return self._normalize_text("\n".join(html_parts))
        return None

    def _get_payload(self, part: Message) -> str:
        payload = part.get_payload(decode=True)
        if isinstance(payload, bytes):
            return self._decode_bytes(payload, part.get_content_charset())
        return str(payload or "")

    def _html_to_text(self, html_content: str) -> str:
        """Convert HTML to plain text"""
        soup = BeautifulSoup(html.unescape(html_content), "html.parser")

        for script in soup(["script", "style"]):
            script.decompose()

        lines = (line.strip() for line in soup.get_text().splitlines())
        return "\n".join(line for line in lines if line)

    def _is_attachment(self, part: Message) -> bool:
        disposition = (part.get("Content-Disposition") or "").lower()
        return disposition.startswith("attachment") or part.get_filename() is not None

    def _extract_attachments(self, msg: Message) -> List[Attachment]:
        attachments = []
        for part in msg.walk():
            if part.is_multipart() or not self._is_attachment(part):
                continue
            payload = part.get_payload(decode=True) or b""
            attachments.append(Attachment(
                filename=self._clean_header_value(part.get_filename() or "unnamed"),
                content_type=part.get_content_type(),
                size=len(payload),
            ))
        return attachments

    def _clean_header_value(self, value: str) -> str:
        """Decode RFC 2047 encoded words and collapse whitespace"""
        if not value:
            return ""
        try:
            value = str(make_header(decode_header(value)))
        except (UnicodeDecodeError, LookupError):
            error_handler.logger.debug(f"Could not decode header value: {value!r}")
        return re.sub(r"\s+", " ", value).strip()

    def _normalize_text(self, text: str) -> str:
        text = text.replace("\r\n", "\n").replace("\r", "\n")
        text = re.sub(r"\n{3,}", "\n\n", text)
        return text.strip()


class Mailbox:
    """
    Holds the currently selected item and notifies listeners on selection changes.
    """

    def __init__(self, item: Optional[MailItem] = None):
        self._item = item
        self._handlers: List[Callable[[Optional[MailItem]], object]] = []

    @property
    def item(self) -> Optional[MailItem]:
        return self._item

    def add_item_changed_handler(self, handler: Callable[[Optional[MailItem]], object]):
        self._handlers.append(handler)

    def remove_item_changed_handler(self, handler: Callable[[Optional[MailItem]], object]):
        self._handlers.remove(handler)

    def select(self, item: Optional[MailItem]):
        """Change the selected item and notify every registered handler"""
        self._item = item
        for handler in list(self._handlers):
            handler(item)
