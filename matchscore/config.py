"""
Matching configuration: weight tree and gate thresholds.

The engine receives a MatchingConfig value at call time. The provider
only resolves which configuration is active; a missing or invalid
persisted configuration falls back to the built-in defaults.
"""

from dataclasses import dataclass, asdict
from numbers import Real
from typing import Any, Dict, List, Optional

from .logger import get_logger


@dataclass(frozen=True)
class FitWeights:
    skills: float = 0.5
    experience: float = 0.3
    industry: float = 0.2


@dataclass(frozen=True)
class ConstraintWeights:
    salary: float = 0.4
    commute: float = 0.35
    start_date: float = 0.25


@dataclass(frozen=True)
class Weights:
    fit: float = 0.6
    constraints: float = 0.4
    fit_breakdown: FitWeights = FitWeights()
    constraint_breakdown: ConstraintWeights = ConstraintWeights()


@dataclass(frozen=True)
class GateThresholds:
    salary_warn_percent: float = 15
    salary_fail_percent: float = 35
    commute_warn_minutes: float = 45
    commute_fail_minutes: float = 75
    availability_warn_days: float = 60
    availability_fail_days: float = 120
    min_skill_match_percent: float = 30


@dataclass(frozen=True)
class MatchingConfig:
    weights: Weights = Weights()
    gate_thresholds: GateThresholds = GateThresholds()

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


DEFAULT_CONFIG = MatchingConfig()

# Persisted rows may use the camelCase keys of the web client
_KEY_ALIASES = {
    "startDate": "start_date",
    "fitBreakdown": "fit_breakdown",
    "constraintBreakdown": "constraint_breakdown",
    "gateThresholds": "gate_thresholds",
}

_WARN_FAIL_PAIRS = [
    ("salary_warn_percent", "salary_fail_percent"),
    ("commute_warn_minutes", "commute_fail_minutes"),
    ("availability_warn_days", "availability_fail_days"),
]


def _canonical_keys(data: Any) -> Any:
    if not isinstance(data, dict):
        return data
    return {_KEY_ALIASES.get(k, k): _canonical_keys(v) for k, v in data.items()}


def _deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    merged = dict(base)
    for key, value in override.items():
        if key in merged and isinstance(merged[key], dict) and isinstance(value, dict):
            merged[key] = _deep_merge(merged[key], value)
        elif key in merged:
            merged[key] = value
    return merged


def _is_number(v: Any) -> bool:
    return isinstance(v, Real) and not isinstance(v, bool)


def validate_config(data: Dict[str, Any]) -> List[str]:
    """
    Returns a list of validation error messages for a raw configuration
    (after merging with defaults). Empty list means valid.
    """
    if data is not None and not isinstance(data, dict):
        return ["Matching config must be a JSON object"]

    errors: List[str] = []
    merged = _deep_merge(DEFAULT_CONFIG.to_dict(), _canonical_keys(data or {}))

    def walk(prefix: str, shape: Dict[str, Any], node: Dict[str, Any]) -> None:
        for key, default in shape.items():
            path = f"{prefix}.{key}" if prefix else key
            value = node.get(key)
            if isinstance(default, dict):
                if isinstance(value, dict):
                    walk(path, default, value)
                else:
                    errors.append(f"Field '{path}' must be an object")
            elif not _is_number(value):
                errors.append(f"Field '{path}' must be a number")
            elif value < 0:
                errors.append(f"Field '{path}' must not be negative")

    walk("", DEFAULT_CONFIG.to_dict(), merged)

    thresholds = merged["gate_thresholds"]
    for warn_key, fail_key in _WARN_FAIL_PAIRS:
        warn, fail = thresholds.get(warn_key), thresholds.get(fail_key)
        if _is_number(warn) and _is_number(fail) and warn > fail:
            errors.append(f"Threshold '{warn_key}' must not exceed '{fail_key}'")

    return errors


def config_from_dict(data: Dict[str, Any]) -> MatchingConfig:
    """Build a MatchingConfig from a raw (possibly partial) mapping.

    Raises ValueError when the merged configuration is invalid.
    """
    errors = validate_config(data)
    if errors:
        raise ValueError("; ".join(errors))

    merged = _deep_merge(DEFAULT_CONFIG.to_dict(), _canonical_keys(data or {}))
    w = merged["weights"]
    return MatchingConfig(
        weights=Weights(
            fit=float(w["fit"]),
            constraints=float(w["constraints"]),
            fit_breakdown=FitWeights(**{k: float(v) for k, v in w["fit_breakdown"].items()}),
            constraint_breakdown=ConstraintWeights(
                **{k: float(v) for k, v in w["constraint_breakdown"].items()}
            ),
        ),
        gate_thresholds=GateThresholds(
            **{k: float(v) for k, v in merged["gate_thresholds"].items()}
        ),
    )


def resolve_config(raw: Optional[Dict[str, Any]]) -> MatchingConfig:
    """Turn the active persisted configuration (or None) into a MatchingConfig."""
    logger = get_logger()
    if not raw:
        logger.info("No active matching config, using defaults")
        return DEFAULT_CONFIG
    try:
        return config_from_dict(raw)
    except ValueError as e:
        logger.warning("Invalid matching config, using defaults", error=str(e))
        return DEFAULT_CONFIG


class ConfigProvider:
    """Resolves the active configuration from a record source."""

    def __init__(self, source):
        self.source = source

    def active(self) -> MatchingConfig:
        return resolve_config(self.source.get_active_config())
