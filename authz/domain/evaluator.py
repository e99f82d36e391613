"""
Hybrid RBAC + ABAC permission evaluator.

Evaluation runs two independent checks and merges them:

1. RBAC: scan the subject's roles in the given order; the first role holding a
   permission for (resource, action) grants access.
2. ABAC: scan the policies registered for (resource, action) by priority
   (highest first, ties broken by policy id); the first active policy whose
   conditions all pass decides with its effect.
3. Combine: explicit policy deny > explicit policy allow > RBAC result.

Repository failures abort the evaluation with an EvaluationError naming the
phase. A policy whose conditions cannot be decoded is logged, recorded as
skipped in the trace, and the scan continues.
"""

import dataclasses
import logging
from typing import List, Optional

from authz.core.config import settings
from authz.core.errors import ConditionDecodeError, DomainError, ErrorKind, EvaluationError
from authz.domain.conditions import ConditionEvaluator, parse_conditions
from authz.domain.evaluation import (
    EvaluationContext,
    EvaluationResult,
    EvaluationTrace,
    OutcomeStatus,
)
from authz.domain.policy import Policy
from authz.domain.repositories import PolicyRepository, RoleRepository
from authz.domain.valueobjects import PolicyEffect

logger = logging.getLogger(__name__)


class RBACEvaluator:
    """Role-based check over the roles listed in the context."""

    def __init__(self, role_repo: RoleRepository):
        self.role_repo = role_repo

    async def evaluate(self, ctx: EvaluationContext) -> EvaluationResult:
        for role_id in ctx.user_roles:
            try:
                permissions = await self.role_repo.find_permissions_by_role(role_id)
            except Exception as e:
                raise EvaluationError(
                    "rbac", f"failed to find permissions for role {role_id}: {e}"
                ) from e

            for permission in permissions:
                if permission.matches(ctx.resource, ctx.action):
                    logger.debug(
                        f"RBAC grant: user {ctx.user_id} role {role_id} "
                        f"permission {permission.id} for {ctx.resource}:{ctx.action}"
                    )
                    return EvaluationResult(
                        allowed=True,
                        effect=PolicyEffect.ALLOW,
                        reason=f"RBAC: role {role_id} has permission {permission.id}",
                        matched_rule=f"role:{role_id}:permission:{permission.id}",
                    )

        return EvaluationResult.default_deny("no matching role permissions")


class ABACEvaluator:
    """Attribute-based check over the policies registered for the resource/action."""

    def __init__(self, policy_repo: PolicyRepository, condition_evaluator: Optional[ConditionEvaluator] = None):
        self.policy_repo = policy_repo
        self.conditions = condition_evaluator or ConditionEvaluator()

    @staticmethod
    def order_policies(policies: List[Policy]) -> List[Policy]:
        """Priority descending, then policy id ascending."""
        return sorted(policies, key=lambda p: (-p.priority, p.id))

    async def evaluate(self, ctx: EvaluationContext) -> EvaluationResult:
        try:
            policies = await self.policy_repo.find_by_resource_and_action(ctx.resource, ctx.action)
        except Exception as e:
            raise EvaluationError("abac", f"failed to find policies: {e}") from e

        trace = EvaluationTrace()
        if not policies:
            return EvaluationResult.default_deny("no matching policies", trace)

        for policy in self.order_policies(policies):
            if not policy.is_active:
                trace.record(policy.id, OutcomeStatus.INACTIVE, "policy is inactive")
                continue
            if not policy.matches(ctx.resource, ctx.action):
                trace.record(policy.id, OutcomeStatus.NOT_MATCHED, "resource/action mismatch")
                continue

            try:
                conditions = parse_conditions(policy.conditions)
            except ConditionDecodeError as e:
                logger.warning(f"Skipping policy {policy.id}: malformed conditions: {e}")
                trace.record(policy.id, OutcomeStatus.SKIPPED, f"malformed conditions: {e}")
                continue

            check = self.conditions.check(conditions, ctx)
            if not check.passed:
                trace.record(policy.id, OutcomeStatus.NOT_MATCHED, check.reason)
                continue

            trace.record(policy.id, OutcomeStatus.MATCHED, check.reason)
            logger.debug(
                f"ABAC {policy.effect.value}: policy {policy.id} matched for "
                f"user {ctx.user_id} on {ctx.resource}:{ctx.action}"
            )
            return EvaluationResult(
                allowed=policy.effect is PolicyEffect.ALLOW,
                effect=policy.effect,
                reason=f"policy {policy.name} matched",
                matched_rule=f"policy:{policy.id}",
                trace=trace,
            )

        return EvaluationResult.default_deny("no policy conditions matched", trace)


def combine_results(rbac_result: EvaluationResult, abac_result: EvaluationResult) -> EvaluationResult:
    """
    Merge the two sub-results.

    Precedence: explicit policy deny, explicit policy allow, then the RBAC result as-is.
    """
    if abac_result.effect is PolicyEffect.DENY and abac_result.matched_rule:
        return abac_result
    if abac_result.effect is PolicyEffect.ALLOW and abac_result.matched_rule:
        return abac_result
    return rbac_result


class PermissionEvaluator:
    """
    Runs RBAC and ABAC for one context and combines the outcomes.

    Holds no per-call state; a single instance may serve concurrent calls.
    """

    def __init__(
        self,
        role_repo: RoleRepository,
        policy_repo: PolicyRepository,
        trace_enabled: Optional[bool] = None,
    ):
        self.rbac = RBACEvaluator(role_repo)
        self.abac = ABACEvaluator(policy_repo)
        self.trace_enabled = settings.evaluation_trace_enabled if trace_enabled is None else trace_enabled

    async def evaluate(self, ctx: Optional[EvaluationContext]) -> EvaluationResult:
        """
        Decide whether the context's subject may perform the action.

        Raises:
            DomainError: INVALID_EVALUATION_CONTEXT if ctx is missing
            EvaluationError: If a repository call fails during either phase
        """
        if ctx is None:
            raise DomainError(ErrorKind.INVALID_EVALUATION_CONTEXT, "evaluation context is nil")

        rbac_result = await self.rbac.evaluate(ctx)
        abac_result = await self.abac.evaluate(ctx)

        result = combine_results(rbac_result, abac_result)
        trace = abac_result.trace if self.trace_enabled else None
        result = dataclasses.replace(result, trace=trace)

        logger.debug(
            f"Decision for user {ctx.user_id} on {ctx.resource}:{ctx.action}: "
            f"allowed={result.allowed} rule='{result.matched_rule}' reason='{result.reason}'"
        )
        return result
