"""
Analysis Orchestrator for Phish-Lens

Runs one analysis at a time for the selected email:

    fetch item -> build prompt -> call service -> sanitize -> parse -> validate -> publish

Two triggers can start a run: the user (start) and a selection change
(on_item_changed). A trigger that arrives while a run is in flight is dropped,
not queued. A selection change during a run also makes that run stale: its
result is returned to the caller but not published.

Every run ends in exactly one AnalysisResult tagged with an Outcome, and the
orchestrator is back to IDLE before the result is published.
"""

import threading
import time
from dataclasses import dataclass, replace
from enum import Enum
from typing import Callable, Dict, Optional

from email_processor import Mailbox, MailItem
from error_handling import (
    MailboxError,
    ParseError,
    PhishLensError,
    UpstreamFailure,
    ValidationError,
    error_handler,
)
from llm_service import TextGenerationService
from models import EmailMetadata, Verdict
from prompt_builder import build_prompt
from response_parser import parse_verdict, sanitize
from risk_assessment import RiskTier, classify, validate_verdict


UPSTREAM_FAILURE_MESSAGE = "Error analyzing email. Please try again later."
MAILBOX_FAILURE_MESSAGE = "Could not read the selected email."
PARSE_FAILURE_MESSAGE = "Could not interpret the analysis. Please try again."


class AnalysisState(Enum):
    IDLE = "idle"
    RUNNING = "running"


class Outcome(Enum):
    VERDICT = "verdict"
    UPSTREAM_FAILURE = "upstream-failure"
    PARSE_FAILURE = "parse-failure"


@dataclass(frozen=True)
class AnalysisResult:
    """Settled result of one run"""
    outcome: Outcome
    verdict: Optional[Verdict] = None
    message: str = ""
    error: Optional[Dict] = None
    generation: int = 0
    processing_time: float = 0.0
    published: bool = False

    @property
    def succeeded(self) -> bool:
        return self.outcome is Outcome.VERDICT

    @property
    def risk_tier(self) -> Optional[RiskTier]:
        if self.verdict is None:
            return None
        return classify(self.verdict.confidence)


class AnalysisOrchestrator:
    """
    Single-flight coordinator for analyses of the mailbox's selected item.

    Args:
        mailbox: Source of the selected item and of selection-changed events
        service: Text-generation service called once per run
        publish: Optional callback receiving every current (non-stale) result
    """

    def __init__(self, mailbox: Mailbox, service: TextGenerationService,
                 publish: Optional[Callable[[AnalysisResult], object]] = None):
        self.mailbox = mailbox
        self.service = service
        self._publish = publish
        self._state = AnalysisState.IDLE
        self._generation = 0
        # Guards state and generation only; never held across the service call
        self._lock = threading.Lock()
        self.last_result: Optional[AnalysisResult] = None

    @property
    def state(self) -> AnalysisState:
        return self._state

    @property
    def is_running(self) -> bool:
        return self._state is AnalysisState.RUNNING

    @property
    def generation(self) -> int:
        return self._generation

    def attach(self):
        """Start listening for selection changes on the mailbox"""
        self.mailbox.add_item_changed_handler(self.on_item_changed)

    def detach(self):
        self.mailbox.remove_item_changed_handler(self.on_item_changed)

    def start(self) -> Optional[AnalysisResult]:
        """
        Analyze the selected item.

        Returns:
            The settled result, or None when a run was already in flight
        """
        generation = self._begin()
        if generation is None:
            error_handler.logger.info("Analysis already in progress, trigger dropped")
            return None

        error_handler.logger.info(f"Analysis #{generation} started")
        start_time = time.time()
        try:
            result = self._run(generation)
        finally:
            with self._lock:
                self._state = AnalysisState.IDLE

        result = replace(result, processing_time=round(time.time() - start_time, 2))
        return self._settle(result)

    def on_item_changed(self, item: Optional[MailItem] = None) -> Optional[AnalysisResult]:
        """Selection-changed trigger: invalidates any in-flight run, then starts a new one"""
        with self._lock:
            self._generation += 1
            busy = self._state is AnalysisState.RUNNING

        if busy:
            error_handler.logger.info("Selection changed during analysis, trigger dropped")
            return None
        return self.start()

    def _begin(self) -> Optional[int]:
        with self._lock:
            if self._state is AnalysisState.RUNNING:
                return None
            self._state = AnalysisState.RUNNING
            self._generation += 1
            return self._generation

    def _run(self, generation: int) -> AnalysisResult:
        try:
            content, metadata = self._fetch_item()
            prompt = build_prompt(content, metadata)
            raw_reply = self.service.generate(prompt)
            verdict = validate_verdict(parse_verdict(sanitize(raw_reply)))
        except MailboxError as e:
            return self._failure(Outcome.UPSTREAM_FAILURE, MAILBOX_FAILURE_MESSAGE, e, generation)
        except UpstreamFailure as e:
            return self._failure(Outcome.UPSTREAM_FAILURE, UPSTREAM_FAILURE_MESSAGE, e, generation)
        except (ParseError, ValidationError) as e:
            return self._failure(Outcome.PARSE_FAILURE, PARSE_FAILURE_MESSAGE, e, generation)
        except Exception as e:
            return self._failure(Outcome.UPSTREAM_FAILURE, UPSTREAM_FAILURE_MESSAGE, e, generation)

        error_handler.logger.info(
            f"Analysis #{generation} finished: confidence {verdict.confidence} "
            f"({classify(verdict.confidence).label})"
        )
        return AnalysisResult(outcome=Outcome.VERDICT, verdict=verdict, generation=generation)

    def _fetch_item(self):
        """Read body and metadata of the selected item"""
        item = self.mailbox.item
        if item is None:
            raise MailboxError("No email is selected")

        body = item.get_body()
        if not body.succeeded:
            raise MailboxError(f"Could not read the email body: {body.error or body.status}")

        return body.value, EmailMetadata.from_item(item)

    def _failure(self, outcome: Outcome, message: str, error: Exception,
                 generation: int) -> AnalysisResult:
        context = f"Analysis #{generation}"
        if not isinstance(error, PhishLensError):
            context += " failed unexpectedly"
        error_info = error_handler.handle_error(error, context)
        return AnalysisResult(outcome=outcome, message=message, error=error_info, generation=generation)

    def _settle(self, result: AnalysisResult) -> AnalysisResult:
        """Publish the result unless a newer trigger made it stale"""
        with self._lock:
            current = result.generation == self._generation

        if not current:
            error_handler.logger.info(f"Analysis #{result.generation} is stale, result discarded")
            return result

        result = replace(result, published=True)
        self.last_result = result
        if self._publish is not None:
            self._publish(result)
        return result
