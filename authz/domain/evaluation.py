"""
Evaluation context, result and trace types.

These are transient values built per call; nothing here is persisted.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from authz.domain.valueobjects import PolicyEffect, RoleID


@dataclass
class EvaluationContext:
    """Facts a single access decision is computed over."""

    user_id: str
    resource: str
    action: str
    user_roles: List[RoleID] = field(default_factory=list)
    resource_ctx: Dict[str, Any] = field(default_factory=dict)
    environment: Dict[str, Any] = field(default_factory=dict)


class OutcomeStatus(str, Enum):
    """What happened to one policy during an ABAC scan."""

    MATCHED = "matched"
    NOT_MATCHED = "not_matched"
    SKIPPED = "skipped"
    INACTIVE = "inactive"


@dataclass(frozen=True)
class PolicyOutcome:
    policy_id: str
    status: OutcomeStatus
    reason: str = ""


@dataclass
class EvaluationTrace:
    """Per-policy outcomes of one ABAC scan, in scan order."""

    outcomes: List[PolicyOutcome] = field(default_factory=list)

    def record(self, policy_id: str, status: OutcomeStatus, reason: str = "") -> None:
        self.outcomes.append(PolicyOutcome(policy_id, status, reason))

    def with_status(self, status: OutcomeStatus) -> List[PolicyOutcome]:
        return [o for o in self.outcomes if o.status is status]

    @property
    def skipped(self) -> List[PolicyOutcome]:
        return self.with_status(OutcomeStatus.SKIPPED)

    @property
    def scanned_ids(self) -> List[str]:
        return [o.policy_id for o in self.outcomes]


@dataclass
class EvaluationResult:
    """
    Outcome of an evaluation.

    An empty ``matched_rule`` means no explicit rule fired and the result is a default.
    """

    allowed: bool
    effect: PolicyEffect
    reason: str
    matched_rule: str = ""
    trace: Optional[EvaluationTrace] = None

    @classmethod
    def default_deny(cls, reason: str, trace: Optional[EvaluationTrace] = None) -> "EvaluationResult":
        return cls(allowed=False, effect=PolicyEffect.DENY, reason=reason, matched_rule="", trace=trace)
