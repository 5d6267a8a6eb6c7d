from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional


@dataclass(frozen=True)
class ComplianceResult:
    is_compliant: bool
    notes: List[str] = field(default_factory=list)

    @property
    def joined_notes(self) -> Optional[str]:
        return "; ".join(self.notes) if self.notes else None


class ComplianceRuleSet(ABC):
    """Rule set interface (Strategy Pattern for labor-time rules)."""

    # Breaks shorter than this do not count toward a required break.
    min_qualifying_break_minutes: int = 0

    @abstractmethod
    def check_compliance(self, work_minutes: int, break_minutes: int) -> ComplianceResult:
        raise NotImplementedError

    def rest_period_violation(self, previous_last_event: Optional[datetime], current_first_event: Optional[datetime]) -> Optional[str]:
        """Note describing a too-short rest between shifts, or None."""
        return None
