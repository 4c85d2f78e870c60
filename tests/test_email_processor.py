"""
Tests for mail items, .eml parsing and the selection source.
"""

from sample_emails import NO_BODY_EML, PHISHING_HTML_EML, PLAIN_EML

from email_processor import BODY_FAILED, EmailProcessor, Mailbox, TextMailItem
from models import EmailMetadata


def test_parse_plain_eml():
    item = EmailProcessor().parse(PLAIN_EML)

    assert item.sender_address == "security@github.com"
    assert item.subject == "Password Reset Confirmation"
    assert item.attachments == []

    body = item.get_body()
    assert body.succeeded
    assert body.value.startswith("Hi developer,")
    assert "GitHub Security Team" in body.value


def test_parse_html_only_eml_with_attachment():
    item = EmailProcessor().parse(PHISHING_HTML_EML)

    assert item.sender_address == "support@paypa1-secure.tk"
    assert item.subject == "URGENT: Account Suspended"

    body = item.get_body().value
    assert "Your account has been" in body
    assert "suspended" in body
    assert "alert(1)" not in body
    assert "color: red" not in body

    assert len(item.attachments) == 1
    assert item.attachments[0].filename == "invoice.zip"
    assert item.attachments[0].content_type == "application/zip"


def test_parse_bytes_detects_encoding():
    data = PLAIN_EML.replace("Hi developer", "Hallo Entwickler, schöne Grüße").encode("utf-8")
    item = EmailProcessor().parse_bytes(data)

    assert "schöne Grüße" in item.get_body().value


def test_eml_without_text_body_fails_to_read():
    item = EmailProcessor().parse(NO_BODY_EML)

    body = item.get_body()
    assert body.status == BODY_FAILED
    assert not body.succeeded
    assert len(item.attachments) == 1


def test_metadata_snapshot_from_item():
    item = EmailProcessor().parse(PHISHING_HTML_EML)
    metadata = EmailMetadata.from_item(item)

    assert metadata == EmailMetadata(
        sender="support@paypa1-secure.tk",
        subject="URGENT: Account Suspended",
        has_attachments=True,
    )


def test_metadata_snapshot_without_sender():
    metadata = EmailMetadata.from_item(TextMailItem("body", sender_address="", subject="Hi"))
    assert metadata.sender is None
    assert metadata.to_dict() == {"subject": "Hi", "hasAttachments": False}


def test_mailbox_notifies_handlers_on_select():
    mailbox = Mailbox()
    seen = []
    mailbox.add_item_changed_handler(seen.append)

    item = TextMailItem("hello")
    mailbox.select(item)

    assert mailbox.item is item
    assert seen == [item]

    mailbox.remove_item_changed_handler(seen.append)
    mailbox.select(None)
    assert seen == [item]


def test_unknown_declared_charset_falls_back_to_detection():
    text = EmailProcessor()._decode_bytes(b"hello world", declared="x-no-such-charset")
    assert text == "hello world"
