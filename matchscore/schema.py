from typing import Any, Dict, List

REQUIRED_ID_FIELDS = ["candidateId", "jobId"]
OPTIONAL_ID_FIELDS = ["submissionId"]

OUTCOMES = ["hired", "rejected", "withdrew", "expired"]
REJECTION_CATEGORIES = ["skills", "experience", "salary", "culture", "availability", "other"]


def _is_non_empty_str(v: Any) -> bool:
    return isinstance(v, str) and v.strip() != ""


def validate_match_request(data: Dict[str, Any]) -> List[str]:
    """
    Returns a list of validation error messages. Empty list means valid.
    """
    if not isinstance(data, dict):
        return ["Match request must be a JSON object"]

    errors: List[str] = []

    for f in REQUIRED_ID_FIELDS:
        if f not in data:
            errors.append(f"Missing required field: {f}")
        elif not _is_non_empty_str(data[f]):
            errors.append(f"Field '{f}' must be a non-empty string")

    # Optional ids: null is allowed, anything else must be a string
    for f in OPTIONAL_ID_FIELDS:
        if data.get(f) is not None and not isinstance(data[f], str):
            errors.append(f"Field '{f}' must be a string if provided")

    return errors


def validate_outcome(data: Dict[str, Any]) -> List[str]:
    """Validate an actual-outcome report for a calibration row."""
    errors: List[str] = []

    if not _is_non_empty_str(data.get("submissionId")):
        errors.append("Field 'submissionId' must be a non-empty string")

    outcome = data.get("outcome")
    if outcome not in OUTCOMES:
        errors.append(f"Field 'outcome' must be one of: {', '.join(OUTCOMES)}")

    category = data.get("rejectionCategory")
    if category is not None and category not in REJECTION_CATEGORIES:
        errors.append(
            f"Field 'rejectionCategory' must be one of: {', '.join(REJECTION_CATEGORIES)}"
        )

    return errors
