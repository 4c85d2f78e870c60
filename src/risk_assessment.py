"""
Risk Assessment Module for Phish-Lens

This module validates parsed model replies against the verdict schema,
derives the risk tier from the confidence score and builds the report shown
to the user.
"""

from enum import Enum
from typing import Dict, List

from error_handling import ValidationError
from models import Verdict


NO_ELEMENTS_MESSAGE = "No suspicious elements found"


class RiskTier(Enum):
    """Risk tiers with inclusive confidence ranges"""
    LOW = ("Low", "Low Risk", 0, 49, "green")
    MEDIUM = ("Medium", "Medium Risk", 50, 74, "orange")
    HIGH = ("High", "High Risk", 75, 100, "red")

    def __init__(self, label: str, display_name: str, min_score: int, max_score: int, color: str):
        self.label = label
        self.display_name = display_name
        self.min_score = min_score
        self.max_score = max_score
        self.color = color

    @classmethod
    def from_confidence(cls, confidence: int) -> 'RiskTier':
        """Get risk tier from a confidence score"""
        if confidence >= cls.HIGH.min_score:
            return cls.HIGH
        if confidence >= cls.MEDIUM.min_score:
            return cls.MEDIUM
        return cls.LOW


def classify(confidence: int) -> RiskTier:
    """Map a validated confidence score to its risk tier"""
    return RiskTier.from_confidence(confidence)


def _validate_confidence(candidate: Dict) -> int:
    if "confidence" not in candidate:
        raise ValidationError("confidence", "field is missing")
    confidence = candidate["confidence"]
    # bool is an int subclass but never a score
    if isinstance(confidence, bool) or not isinstance(confidence, int):
        raise ValidationError("confidence", f"must be an integer, got {type(confidence).__name__}")
    if not 0 <= confidence <= 100:
        raise ValidationError("confidence", f"must be between 0 and 100, got {confidence}")
    return confidence


def _validate_elements(candidate: Dict) -> List[str]:
    if "elements" not in candidate:
        raise ValidationError("elements", "field is missing")
    elements = candidate["elements"]
    if not isinstance(elements, list):
        raise ValidationError("elements", f"must be a list, got {type(elements).__name__}")
    for index, element in enumerate(elements):
        if not isinstance(element, str):
            raise ValidationError(
                "elements", f"item {index} must be a string, got {type(element).__name__}"
            )
    return elements


def _validate_reasoning(candidate: Dict) -> str:
    if "reasoning" not in candidate:
        raise ValidationError("reasoning", "field is missing")
    reasoning = candidate["reasoning"]
    if not isinstance(reasoning, str):
        raise ValidationError("reasoning", f"must be a string, got {type(reasoning).__name__}")
    if not reasoning.strip():
        raise ValidationError("reasoning", "must not be empty")
    return reasoning


def validate_verdict(candidate) -> Verdict:
    """
    Check a parsed reply against the verdict schema.

    Args:
        candidate: Object returned by response_parser.parse_verdict

    Returns:
        The validated Verdict

    Raises:
        ValidationError: naming the first offending field
    """
    if not isinstance(candidate, dict):
        raise ValidationError("verdict", f"must be an object, got {type(candidate).__name__}")

    return Verdict(
        confidence=_validate_confidence(candidate),
        elements=tuple(_validate_elements(candidate)),
        reasoning=_validate_reasoning(candidate),
    )


def build_report(verdict: Verdict) -> Dict:
    """
    Build the presentation data for a validated verdict.

    Elements keep the model's order (most severe first) and are only listed
    when there are any; an empty list is a normal, displayable outcome.
    """
    tier = classify(verdict.confidence)
    return {
        "risk_tier": tier.label,
        "risk_level": tier.display_name,
        "risk_color": tier.color,
        "confidence": verdict.confidence,
        "confidence_text": f"({verdict.confidence}%)",
        "elements": verdict.element_list(),
        "has_elements": verdict.has_elements,
        "elements_message": None if verdict.has_elements else NO_ELEMENTS_MESSAGE,
        "reasoning": verdict.reasoning,
    }


def render_report_text(verdict: Verdict) -> str:
    """Plain text rendering of a verdict"""
    report = build_report(verdict)
    lines = [f"Risk Confidence Score: {report['risk_tier']} {report['confidence_text']}"]

    if report["has_elements"]:
        lines.append("Suspicious Elements:")
        lines.extend(f"{i}. {element}" for i, element in enumerate(report["elements"], 1))
    else:
        lines.append(report["elements_message"])

    lines.append(f"Reasoning: {report['reasoning']}")
    return "\n".join(lines)


def render_failure_text(result) -> str:
    """Plain text rendering of a failed analysis result"""
    return f"Analysis error: {result.message}"
