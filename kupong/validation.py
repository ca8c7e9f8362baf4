import logging
import math
from enum import Enum
from typing import List, Optional, Sequence, Tuple

from kupong.config import DEFAULT_POLICY, ScoringPolicy

logger = logging.getLogger(__name__)


class ValidationError(Enum):
    EMPTY_QUESTION_TEXT = "Spørsmålstekst kan ikke være tom."
    TOO_FEW_OPTIONS = "Du må ha minst 2 svaralternativer."
    DUPLICATE_OPTIONS = "Alternativene må være unike."

    @property
    def message(self) -> str:
        return self.value


def clean_options(options: Sequence[str]) -> List[str]:
    return [o.strip() for o in options if o and o.strip()]


def validate_question(text: str, options: Sequence[str]) -> Optional[ValidationError]:
    """Return the first rule a question definition breaks, or None."""
    if not (text or "").strip():
        return ValidationError.EMPTY_QUESTION_TEXT

    trimmed = clean_options(options)
    if len(trimmed) < 2:
        return ValidationError.TOO_FEW_OPTIONS

    if len(set(trimmed)) != len(trimmed):
        return ValidationError.DUPLICATE_OPTIONS

    return None


def parse_option_points(
    raw_values: Sequence,
    option_count: int,
    policy: ScoringPolicy = DEFAULT_POLICY,
) -> Tuple[List[float], List[str]]:
    """Parse admin-entered point values for each option.

    Blank, unparsable or non-positive entries fall back to the default point
    value. Returns (points, warnings); a bad entry never blocks the question.
    """
    points = []
    warnings = []
    for index in range(option_count):
        raw = raw_values[index] if index < len(raw_values) else None
        if raw is None or (isinstance(raw, str) and not raw.strip()):
            points.append(policy.default_point_value)
            continue
        try:
            value = float(str(raw).strip().replace(",", "."))
        except ValueError:
            value = math.nan
        if not math.isfinite(value) or value <= 0:
            warnings.append(
                f"Ugyldig poengverdi for alternativ {index + 1} ({raw!r}), "
                f"bruker {policy.default_point_value} poeng."
            )
            logger.warning("Invalid option points %r at index %s, using default", raw, index)
            points.append(policy.default_point_value)
            continue
        points.append(value)
    return points, warnings
