from dataclasses import dataclass
from enum import Enum
from typing import Any, Mapping, Optional

from csvload.utils.exceptions import InvalidOptionError


class NullPolicy(str, Enum):
    """
    How the null-percentage threshold interacts with column unification.

    FORCE_STRING: a column with nulls above the threshold unifies to string.
    MERGE_ONLY:   the threshold is ignored; only non-null types are merged.
    """
    FORCE_STRING = "force_string"
    MERGE_ONLY = "merge_only"

    @classmethod
    def parse(cls, value: Any) -> "NullPolicy":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).lower())
        except ValueError:
            raise InvalidOptionError(
                "null_policy",
                f"must be one of {[p.value for p in cls]}, got {value!r}",
            ) from None


@dataclass(frozen=True)
class InferenceConfig:
    """
    Options for column type inference.
    """
    null_threshold_pct: float = 40.0
    sniff_row_limit: int = 1_000_000
    null_policy: NullPolicy = NullPolicy.FORCE_STRING

    def __post_init__(self):
        pct = self.null_threshold_pct
        if isinstance(pct, bool) or not isinstance(pct, (int, float)):
            raise InvalidOptionError(
                "null_threshold_pct", f"must be a number, got {pct!r}"
            )
        if not 0.0 <= pct <= 100.0:
            raise InvalidOptionError(
                "null_threshold_pct", f"must be within [0, 100], got {pct}"
            )

        limit = self.sniff_row_limit
        if isinstance(limit, bool) or not isinstance(limit, int) or limit <= 0:
            raise InvalidOptionError(
                "sniff_row_limit", f"must be a positive integer, got {limit!r}"
            )

        object.__setattr__(self, "null_policy", NullPolicy.parse(self.null_policy))

    @classmethod
    def from_mapping(cls, options: Optional[Mapping[str, Any]]) -> "InferenceConfig":
        """
        Build from a YAML/JSON section; unknown keys are rejected.
        """
        options = dict(options or {})
        known = {"null_threshold_pct", "sniff_row_limit", "null_policy"}
        unknown = sorted(set(options) - known)
        if unknown:
            raise InvalidOptionError(unknown[0], f"unknown inference option (allowed: {sorted(known)})")
        return cls(**options)

    def to_dict(self):
        return {
            "null_threshold_pct": self.null_threshold_pct,
            "sniff_row_limit": self.sniff_row_limit,
            "null_policy": self.null_policy.value,
        }
