"""
Error Handling Module for Phish-Lens

This module defines the error taxonomy for an analysis run (upstream failures,
unparseable replies, schema violations) together with a central handler that
logs errors, keeps simple statistics and turns errors into UI-ready dicts.
"""

import json
import logging
import threading
from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional

import requests


class ErrorCategory(Enum):
    """Categories of errors with severity levels and user guidance"""

    # Service errors
    UPSTREAM_FAILURE = ("upstream_failure", "AI Service Unavailable", "high")
    SERVICE_CONNECTION = ("service_connection", "AI Service Connection Failed", "critical")
    NETWORK_TIMEOUT = ("network_timeout", "Network Timeout", "medium")

    # Reply errors
    PARSING_ERROR = ("parsing_error", "Could Not Interpret Analysis", "medium")
    VALIDATION_ERROR = ("validation_error", "Analysis Failed Validation", "medium")

    # Host and setup errors
    MAILBOX_ERROR = ("mailbox_error", "Email Could Not Be Read", "medium")
    CONFIG_ERROR = ("config_error", "Configuration Error", "medium")

    def __init__(self, error_id: str, display_name: str, severity: str):
        self.error_id = error_id
        self.display_name = display_name
        self.severity = severity


class PhishLensError(Exception):
    """Base exception class for Phish-Lens specific errors"""

    default_category = ErrorCategory.UPSTREAM_FAILURE

    def __init__(self, message: str, category: Optional[ErrorCategory] = None,
                 details: Optional[str] = None, suggestions: Optional[List[str]] = None):
        super().__init__(message)
        self.category = category or self.default_category
        self.details = details
        self.suggestions = suggestions or []
        self.timestamp = datetime.now()

    def to_dict(self) -> Dict:
        """Convert error to dictionary for UI display"""
        return {
            "error_id": self.category.error_id,
            "display_name": self.category.display_name,
            "severity": self.category.severity,
            "message": str(self),
            "details": self.details,
            "suggestions": self.suggestions,
            "timestamp": self.timestamp.isoformat()
        }


class UpstreamFailure(PhishLensError):
    """The text-generation service rejected the request or errored."""


class MailboxError(UpstreamFailure):
    """The selected item's body could not be retrieved from the host."""

    default_category = ErrorCategory.MAILBOX_ERROR


class ParseError(PhishLensError):
    """The model reply is not valid structured data."""

    default_category = ErrorCategory.PARSING_ERROR

    def __init__(self, message: str, text: str = "", **kwargs):
        super().__init__(message, **kwargs)
        self.text = text


class ValidationError(PhishLensError):
    """The parsed reply does not match the verdict schema."""

    default_category = ErrorCategory.VALIDATION_ERROR

    def __init__(self, field: str, message: str, **kwargs):
        super().__init__(f"{field}: {message}", **kwargs)
        self.field = field


class ConfigError(PhishLensError):
    """Invalid analyzer configuration."""

    default_category = ErrorCategory.CONFIG_ERROR


class ErrorHandler:
    """
    Central error handling: categorization, logging, statistics and
    user-facing error payloads.
    """

    def __init__(self, log_level: str = "INFO"):
        self.logger = self._setup_logging(log_level)
        self.error_count = {}
        self.last_errors = []
        self.max_error_history = 50
        self._stats_lock = threading.Lock()

    def _setup_logging(self, level: str) -> logging.Logger:
        """Set up logging configuration"""
        logger = logging.getLogger("phish-lens")

        if not logger.handlers:  # Avoid duplicate handlers
            handler = logging.StreamHandler()
            formatter = logging.Formatter(
                '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
            )
            handler.setFormatter(formatter)
            logger.addHandler(handler)
            logger.setLevel(getattr(logging, level.upper()))

        return logger

    def set_level(self, level: str):
        self.logger.setLevel(getattr(logging, level.upper()))

    def handle_error(self, error: Exception, context: str = "",
                     category: Optional[ErrorCategory] = None) -> Dict:
        """
        Central error handling with categorization and user guidance.

        Args:
            error: The exception that occurred
            context: Additional context about where the error occurred
            category: Optional error category (auto-detected if not provided)

        Returns:
            Dict containing error information and user guidance
        """
        if isinstance(error, PhishLensError):
            lens_error = error
            if category is not None:
                lens_error.category = category
        else:
            category = category or self._categorize_error(error)
            lens_error = PhishLensError(
                message=str(error) or type(error).__name__,
                category=category,
                details=context or None,
            )

        if not lens_error.suggestions:
            lens_error.suggestions = self._get_suggestions_for_category(lens_error.category)

        self._log_error(lens_error, context)
        self._track_error(lens_error)

        return self._generate_error_response(lens_error)

    def _categorize_error(self, error: Exception) -> ErrorCategory:
        """Auto-categorize error based on type"""
        if isinstance(error, requests.exceptions.Timeout):
            return ErrorCategory.NETWORK_TIMEOUT
        if isinstance(error, requests.exceptions.ConnectionError):
            return ErrorCategory.SERVICE_CONNECTION
        if isinstance(error, json.JSONDecodeError):
            return ErrorCategory.PARSING_ERROR
        return ErrorCategory.UPSTREAM_FAILURE

    def _get_suggestions_for_category(self, category: ErrorCategory) -> List[str]:
        """Get troubleshooting suggestions for error category"""

        suggestions_map = {
            ErrorCategory.UPSTREAM_FAILURE: [
                "Try again - the service may be temporarily unavailable",
                "Check the configured model name",
                "Check the service logs for details"
            ],
            ErrorCategory.SERVICE_CONNECTION: [
                "Check that the AI service is running and reachable",
                "For Ollama, start the service with: ollama serve",
                "Verify the configured service URL"
            ],
            ErrorCategory.NETWORK_TIMEOUT: [
                "Try again - the model might still be loading",
                "Increase PHISHLENS_TIMEOUT"
            ],
            ErrorCategory.PARSING_ERROR: [
                "Run the analysis again - model replies vary between runs",
                "Try a model that follows JSON instructions more reliably"
            ],
            ErrorCategory.VALIDATION_ERROR: [
                "Run the analysis again - the reply was missing required fields"
            ],
            ErrorCategory.MAILBOX_ERROR: [
                "Select the email again",
                "Check that the .eml file is not corrupted"
            ],
            ErrorCategory.CONFIG_ERROR: [
                "Check the PHISHLENS_* environment variables",
                "Set GEMINI_API_KEY when using the gemini provider"
            ]
        }

        return suggestions_map.get(category, ["Please try again"])

    def _log_error(self, error: PhishLensError, context: str = ""):
        """Log error with appropriate level"""
        log_msg = f"[{error.category.error_id}] {error.category.display_name}: {error}"
        if context:
            log_msg += f" (Context: {context})"

        if error.category.severity == "critical":
            self.logger.critical(log_msg)
        elif error.category.severity == "high":
            self.logger.error(log_msg)
        else:
            self.logger.warning(log_msg)

    def _track_error(self, error: PhishLensError):
        """Track error statistics"""
        category_id = error.category.error_id
        with self._stats_lock:
            self.error_count[category_id] = self.error_count.get(category_id, 0) + 1

            self.last_errors.append({
                "timestamp": error.timestamp,
                "category": category_id,
                "message": str(error)
            })

            if len(self.last_errors) > self.max_error_history:
                self.last_errors = self.last_errors[-self.max_error_history:]

    def _generate_error_response(self, error: PhishLensError) -> Dict:
        """Generate error response for UI"""
        severity_icons = {
            "critical": "🚨",
            "high": "⚠️",
            "medium": "⚠️",
            "low": "ℹ️"
        }

        return {
            "success": False,
            "error": True,
            "category": error.category.error_id,
            "title": f"{severity_icons.get(error.category.severity, '⚠️')} {error.category.display_name}",
            "message": str(error),
            "details": error.details,
            "suggestions": error.suggestions,
            "severity": error.category.severity,
            "timestamp": error.timestamp.isoformat()
        }

    def get_error_statistics(self) -> Dict:
        """Get error statistics for debugging"""
        with self._stats_lock:
            counts = self.error_count.copy()
            recent = self.last_errors[-10:]
        return {
            "error_counts": counts,
            "recent_errors": recent,
            "total_errors": sum(counts.values()),
            "most_common_errors": sorted(
                counts.items(),
                key=lambda x: x[1],
                reverse=True
            )[:5]
        }

    def reset_statistics(self):
        with self._stats_lock:
            self.error_count = {}
            self.last_errors = []


# Global error handler instance
error_handler = ErrorHandler()
