"""
Tests for verdict validation, risk tiers and report rendering.
"""

import pytest

from error_handling import ValidationError
from models import Verdict
from risk_assessment import (
    NO_ELEMENTS_MESSAGE,
    RiskTier,
    build_report,
    classify,
    render_report_text,
    validate_verdict,
)


def valid_candidate(**overrides):
    candidate = {
        "confidence": 85,
        "elements": ["Spoofed sender domain", "Urgent language"],
        "reasoning": "Looks like credential phishing.",
    }
    candidate.update(overrides)
    return candidate


@pytest.mark.parametrize("confidence, tier", [
    (0, RiskTier.LOW),
    (49, RiskTier.LOW),
    (50, RiskTier.MEDIUM),
    (74, RiskTier.MEDIUM),
    (75, RiskTier.HIGH),
    (100, RiskTier.HIGH),
])
def test_classify_boundaries(confidence, tier):
    assert classify(confidence) is tier


def test_validate_returns_verdict():
    verdict = validate_verdict(valid_candidate())
    assert verdict == Verdict(
        confidence=85,
        elements=("Spoofed sender domain", "Urgent language"),
        reasoning="Looks like credential phishing.",
    )


def test_validate_accepts_empty_elements():
    verdict = validate_verdict({"confidence": 85, "elements": [], "reasoning": "test"})
    assert verdict.to_dict() == {"confidence": 85, "elements": [], "reasoning": "test"}
    assert classify(verdict.confidence) is RiskTier.HIGH


def test_validate_ignores_extra_fields():
    verdict = validate_verdict(valid_candidate(recommendation="block"))
    assert not hasattr(verdict, "recommendation")


def test_validate_preserves_element_order():
    elements = ["c", "a", "b"]
    assert validate_verdict(valid_candidate(elements=elements)).element_list() == elements


@pytest.mark.parametrize("field", ["confidence", "elements", "reasoning"])
def test_validate_rejects_missing_field(field):
    candidate = valid_candidate()
    del candidate[field]
    with pytest.raises(ValidationError) as exc_info:
        validate_verdict(candidate)
    assert exc_info.value.field == field


@pytest.mark.parametrize("confidence", [-1, 101, 1000, 85.0, 85.5, "85", None, True, [85]])
def test_validate_rejects_bad_confidence(confidence):
    with pytest.raises(ValidationError) as exc_info:
        validate_verdict(valid_candidate(confidence=confidence))
    assert exc_info.value.field == "confidence"


@pytest.mark.parametrize("elements", ["one element", None, {"a": 1}, ["ok", 3], [None]])
def test_validate_rejects_bad_elements(elements):
    with pytest.raises(ValidationError) as exc_info:
        validate_verdict(valid_candidate(elements=elements))
    assert exc_info.value.field == "elements"


@pytest.mark.parametrize("reasoning", ["", "   ", None, 42, ["text"]])
def test_validate_rejects_bad_reasoning(reasoning):
    with pytest.raises(ValidationError) as exc_info:
        validate_verdict(valid_candidate(reasoning=reasoning))
    assert exc_info.value.field == "reasoning"


def test_validate_rejects_non_object():
    with pytest.raises(ValidationError) as exc_info:
        validate_verdict(["confidence", 85])
    assert exc_info.value.field == "verdict"


def test_validation_error_names_field_in_message():
    with pytest.raises(ValidationError, match="confidence"):
        validate_verdict(valid_candidate(confidence=150))


def test_report_with_elements():
    report = build_report(validate_verdict(valid_candidate(confidence=60)))
    assert report["risk_tier"] == "Medium"
    assert report["confidence_text"] == "(60%)"
    assert report["elements"] == ["Spoofed sender domain", "Urgent language"]
    assert report["elements_message"] is None


def test_report_without_elements():
    verdict = validate_verdict({"confidence": 20, "elements": [], "reasoning": "Nothing unusual"})
    report = build_report(verdict)
    assert report["risk_tier"] == "Low"
    assert not report["has_elements"]
    assert report["elements_message"] == NO_ELEMENTS_MESSAGE


def test_render_text_without_elements():
    text = render_report_text(
        validate_verdict({"confidence": 20, "elements": [], "reasoning": "Nothing unusual"})
    )
    assert "Risk Confidence Score:" in text
    assert "Low" in text
    assert "(20%)" in text
    assert "Suspicious Elements:" not in text
    assert NO_ELEMENTS_MESSAGE in text


def test_render_text_lists_elements_in_order():
    text = render_report_text(validate_verdict(valid_candidate()))
    assert "Suspicious Elements:\n1. Spoofed sender domain\n2. Urgent language" in text
    assert "High (85%)" in text
