import sys
from pathlib import Path

import pytest


# Ensure `src/` is on sys.path so tests can import the modules directly
CURRENT_FILE = Path(__file__).resolve()
SRC_DIR = CURRENT_FILE.parents[1] / "src"
if str(SRC_DIR) not in sys.path:
    sys.path.insert(0, str(SRC_DIR))


from email_processor import Mailbox, TextMailItem  # noqa: E402
from error_handling import error_handler  # noqa: E402


class FakeService:
    """Text-generation service double returning canned replies or raising"""

    name = "Fake"
    model = "fake-model"

    def __init__(self, reply="", error=None, on_generate=None):
        self.reply = reply
        self.error = error
        self.on_generate = on_generate
        self.prompts = []

    def generate(self, prompt):
        self.prompts.append(prompt)
        if self.on_generate is not None:
            self.on_generate()
        if self.error is not None:
            raise self.error
        return self.reply


@pytest.fixture
def mail_item():
    return TextMailItem(
        "Your account is suspended. Verify at http://paypa1-secure.tk now.",
        sender_address="support@paypa1-secure.tk",
        subject="Account suspended",
    )


@pytest.fixture
def mailbox(mail_item):
    return Mailbox(mail_item)


@pytest.fixture(autouse=True)
def reset_error_statistics():
    error_handler.reset_statistics()
    yield
    error_handler.reset_statistics()
