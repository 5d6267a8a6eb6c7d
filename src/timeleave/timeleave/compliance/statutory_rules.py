from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional

from ..common.datetime_utils import minutes_between
from ..common.validators import require_non_negative_minutes
from ..core.exceptions import ValidationError
from .base import ComplianceResult, ComplianceRuleSet

# §3 ArbZG: 10h absolute max, 8h regular max
MAX_WORK_MINUTES = 600
WARN_WORK_MINUTES = 480
# §4 ArbZG: >6h requires 30 min break, >9h requires 45 min break
BREAK_THRESHOLD_1 = 360
BREAK_THRESHOLD_2 = 540
REQUIRED_BREAK_1 = 30
REQUIRED_BREAK_2 = 45
# §5 ArbZG: 11h rest between shifts
MIN_REST_MINUTES = 660
# Breaks shorter than this do not count toward the required break.
MIN_QUALIFYING_BREAK_MINUTES = 15


@dataclass(frozen=True)
class StatutoryComplianceRuleSet(ComplianceRuleSet):
    """Statutory break/rest thresholds. Pure: no clock, no storage."""

    max_work_minutes: int = MAX_WORK_MINUTES
    warn_work_minutes: int = WARN_WORK_MINUTES
    break_threshold_1: int = BREAK_THRESHOLD_1
    break_threshold_2: int = BREAK_THRESHOLD_2
    required_break_1: int = REQUIRED_BREAK_1
    required_break_2: int = REQUIRED_BREAK_2
    min_rest_minutes: int = MIN_REST_MINUTES
    min_qualifying_break_minutes: int = MIN_QUALIFYING_BREAK_MINUTES

    def __post_init__(self):
        for name in (
            "max_work_minutes",
            "warn_work_minutes",
            "break_threshold_1",
            "break_threshold_2",
            "min_rest_minutes",
        ):
            if int(getattr(self, name)) <= 0:
                raise ValidationError(f"{name} must be > 0 minutes")
        if self.break_threshold_1 > self.break_threshold_2:
            raise ValidationError("break_threshold_1 must not exceed break_threshold_2")

    @classmethod
    def from_settings(cls, settings) -> "StatutoryComplianceRuleSet":
        """Build from a settings module; missing attributes keep the statutory defaults."""
        overrides = getattr(settings, "COMPLIANCE_THRESHOLDS", None) or {}
        return cls(**{k: int(v) for k, v in overrides.items()})

    def required_break_minutes(self, work_minutes: int) -> int:
        if work_minutes > self.break_threshold_2:
            return self.required_break_2
        if work_minutes > self.break_threshold_1:
            return self.required_break_1
        return 0

    def check_compliance(self, work_minutes: int, break_minutes: int) -> ComplianceResult:
        work_minutes = require_non_negative_minutes(work_minutes, "work_minutes")
        break_minutes = require_non_negative_minutes(break_minutes, "break_minutes")

        notes: List[str] = []
        compliant = True

        if work_minutes > self.max_work_minutes:
            compliant = False
            notes.append(
                f"§3 ArbZG: Maximum work time of {self.max_work_minutes // 60} hours exceeded "
                f"(worked {work_minutes} min)"
            )
        elif work_minutes > self.warn_work_minutes:
            notes.append(
                f"§3 ArbZG: Regular {self.warn_work_minutes // 60}-hour limit exceeded "
                f"(worked {work_minutes} min); ensure 6-month average compliance"
            )

        required = self.required_break_minutes(work_minutes)
        if required > 0 and break_minutes < required:
            compliant = False
            notes.append(
                f"§4 ArbZG: Insufficient break time ({break_minutes} min taken, "
                f"{required} min required for {work_minutes} min of work)"
            )

        return ComplianceResult(is_compliant=compliant, notes=notes)

    def check_rest_period(self, previous_last_event: Optional[datetime], current_first_event: Optional[datetime]) -> bool:
        if previous_last_event is None or current_first_event is None:
            return True
        return minutes_between(previous_last_event, current_first_event) >= self.min_rest_minutes

    def rest_period_violation(self, previous_last_event: Optional[datetime], current_first_event: Optional[datetime]) -> Optional[str]:
        if self.check_rest_period(previous_last_event, current_first_event):
            return None
        rest = minutes_between(previous_last_event, current_first_event)
        return (
            f"§5 ArbZG: Rest period of {rest} min since last shift is below "
            f"the required {self.min_rest_minutes} min"
        )
