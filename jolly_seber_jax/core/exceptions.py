"""
Exception classes for jolly-seber-jax.

Provides rich error information with actionable suggestions.
"""

from typing import List, Optional, Dict, Any, Sequence


class JollySeberError(Exception):
    """
    Base exception class for jolly-seber-jax with rich error information.

    Provides structured error information including suggestions for resolution
    and the context in which the error occurred.
    """

    def __init__(
        self,
        message: str,
        suggestions: Optional[List[str]] = None,
        error_code: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None
    ):
        self.suggestions = suggestions or []
        self.error_code = error_code
        self.context = context or {}
        super().__init__(message)

    def __str__(self) -> str:
        """Return formatted error message with suggestions."""
        message = super().__str__()

        if self.error_code:
            message = f"[{self.error_code}] {message}"

        if self.suggestions:
            message += "\n\nSuggestions:"
            for i, suggestion in enumerate(self.suggestions, 1):
                message += f"\n  {i}. {suggestion}"

        return message


class InvalidParameterError(JollySeberError):
    """Exception raised when a parameter value is outside its domain."""

    def __init__(
        self,
        parameter: Optional[str] = None,
        value: Any = None,
        domain: Optional[str] = None,
        **kwargs
    ):
        if parameter and domain:
            message = f"Parameter '{parameter}' must lie in {domain}, got {value}"
            suggestions = [
                f"Check the proposal for '{parameter}' before evaluating the model",
                "Use log_density_unconstrained() to work on an unbounded scale",
                "Reject proposals outside the support in the inference engine",
            ]
        elif parameter:
            message = f"Invalid value for parameter '{parameter}': {value}"
            suggestions = [
                "Check parameter construction",
                "Ensure all values are finite",
            ]
        else:
            message = "Invalid parameter set"
            suggestions = [
                "Probabilities must lie strictly between 0 and 1",
                "Entry weights must be strictly positive",
            ]

        kwargs.pop('suggestions', None)

        super().__init__(
            message=message,
            suggestions=suggestions,
            error_code="INVALID_PARAMETER",
            context={"parameter": parameter, "value": value, "domain": domain},
            **kwargs
        )


class ShapeMismatchError(JollySeberError):
    """Exception raised when array shapes disagree with the number of occasions."""

    def __init__(
        self,
        name: Optional[str] = None,
        expected: Optional[Sequence[int]] = None,
        actual: Optional[Sequence[int]] = None,
        specific_issue: Optional[str] = None,
        **kwargs
    ):
        if name and expected is not None:
            message = f"{name} has shape {tuple(actual) if actual is not None else None}, expected {tuple(expected)}"
            suggestions = [
                f"Check the construction of {name}",
                "Entry weights need one value per occasion",
                "Survival matrices need one column per interval (T - 1)",
            ]
        elif specific_issue:
            message = f"Shape mismatch: {specific_issue}"
            suggestions = [
                "All capture histories must have the same number of occasions",
                "Check data augmentation and padding",
            ]
        else:
            message = "Array shapes are inconsistent"
            suggestions = [
                "Check capture matrix and parameter dimensions",
            ]

        kwargs.pop('suggestions', None)

        super().__init__(
            message=message,
            suggestions=suggestions,
            error_code="SHAPE_MISMATCH",
            context={
                "name": name,
                "expected": tuple(expected) if expected is not None else None,
                "actual": tuple(actual) if actual is not None else None,
            },
            **kwargs
        )


class DataFormatError(JollySeberError):
    """Exception raised for capture history format issues."""

    def __init__(self, specific_issue: Optional[str] = None, **kwargs):
        if specific_issue:
            message = f"Data format issue: {specific_issue}"
        else:
            message = "Capture history validation failed"

        suggestions = [
            "Ensure capture histories contain only 0s and 1s",
            "Capture history strings should look like '01011'",
            "Check for missing or corrupted data",
        ]

        kwargs.pop('suggestions', None)

        super().__init__(
            message=message,
            suggestions=suggestions,
            error_code="DATA_FORMAT",
            context={"specific_issue": specific_issue},
            **kwargs
        )


class DegenerateNormalizationError(JollySeberError):
    """
    Exception raised when the remaining entry mass collapses before the
    final occasion and the configured policy is to raise.
    """

    def __init__(
        self,
        occasion: Optional[int] = None,
        remaining_mass: Optional[float] = None,
        **kwargs
    ):
        if occasion is not None:
            message = (
                f"Remaining entry mass {remaining_mass} at occasion {occasion} "
                "is below the numerical floor"
            )
        else:
            message = "Entry probabilities could not be normalized"

        suggestions = [
            "Entry weights concentrate almost all mass on early occasions",
            "Set model.degenerate_policy='clamp' to evaluate with clamped values",
            "Let the inference engine reject this proposal",
        ]

        kwargs.pop('suggestions', None)

        super().__init__(
            message=message,
            suggestions=suggestions,
            error_code="DEGENERATE_NORMALIZATION",
            context={"occasion": occasion, "remaining_mass": remaining_mass},
            **kwargs
        )


class ValidationError(JollySeberError):
    """Exception raised for generic array validation failures."""

    def __init__(self, message: Optional[str] = None, **kwargs):
        suggestions = kwargs.pop('suggestions', None) or [
            "Check input array construction",
        ]
        kwargs.setdefault('error_code', "VALIDATION")

        super().__init__(
            message=message or "Validation checks failed",
            suggestions=suggestions,
            **kwargs
        )


class ConfigurationError(JollySeberError):
    """Exception raised for an unknown key or an unreadable configuration source."""

    def __init__(self, config_key: Optional[str] = None, **kwargs):
        if config_key:
            message = f"Cannot apply configuration '{config_key}'"
            suggestions = [
                "Nested settings use dotted keys such as 'model.mass_floor'",
                "Configuration files must hold a YAML mapping of sections",
                "Environment variables use the JOLLY_SEBER_JAX_ prefix",
                "Use jolly_seber_jax.get_config() to inspect current settings",
            ]
        else:
            message = "Configuration could not be applied"
            suggestions = [
                "Sections are model, simulation, logging and performance",
            ]

        kwargs.pop('suggestions', None)

        super().__init__(
            message=message,
            suggestions=suggestions,
            error_code="CONFIG",
            context={"config_key": config_key},
            **kwargs
        )
