"""
SQLAlchemy implementation of PolicyRepository.

Conditions are stored as JSON text. A stored value that is not valid JSON is
handed to the aggregate as raw text so the evaluator can skip that policy
without affecting the rest of the scan. A row that violates the Policy
invariants (unknown effect, malformed resource name) raises DomainError.
"""

import json
import logging
from typing import Any, List

from sqlalchemy import func

from authz.core.errors import DomainError, ErrorKind
from authz.domain.conditions import dump_conditions
from authz.domain.policy import Policy
from authz.domain.repositories import PolicyRepository
from authz.models.policy import PolicyModel
from authz.repositories.base import SQLAlchemyRepository

logger = logging.getLogger(__name__)


def encode_conditions(conditions: Any) -> str:
    if isinstance(conditions, str):
        return conditions
    try:
        return json.dumps(dump_conditions(conditions))
    except (TypeError, ValueError) as e:
        raise DomainError(ErrorKind.INVALID_POLICY, f"conditions are not serializable: {e}") from e


def decode_conditions(text: str, policy_id: str = "") -> Any:
    if text is None:
        return {}
    try:
        value = json.loads(text)
    except ValueError as e:
        logger.warning(f"Policy {policy_id} has undecodable conditions: {e}")
        return text
    return {} if value is None else value


def policy_to_aggregate(model: PolicyModel) -> Policy:
    return Policy(
        id=model.id,
        name=model.name,
        description=model.description or "",
        resource=model.resource_type,
        action=model.action,
        effect=model.effect,
        conditions=decode_conditions(model.conditions, model.id),
        priority=model.priority,
        is_active=model.is_active,
        created_at=model.created_at,
        updated_at=model.updated_at,
    )


class SQLAlchemyPolicyRepository(SQLAlchemyRepository, PolicyRepository):

    def _to_aggregates(self, models: List[PolicyModel]) -> List[Policy]:
        policies = []
        for model in models:
            try:
                policies.append(policy_to_aggregate(model))
            except DomainError as e:
                # An unloadable row fails the whole load, never just drops out
                logger.error(f"Policy {model.id} cannot be loaded: {e}")
                raise
        return policies

    async def save(self, policy: Policy) -> None:
        conditions = encode_conditions(policy.conditions)
        with self._transaction() as db:
            model = db.get(PolicyModel, policy.id)
            if model is None:
                model = PolicyModel(id=policy.id)
                db.add(model)
            model.name = policy.name
            model.description = policy.description
            model.resource_type = str(policy.resource)
            model.action = str(policy.action)
            model.effect = policy.effect.value
            model.conditions = conditions
            model.priority = policy.priority
            model.is_active = policy.is_active
            model.copy_timestamps(policy)

    async def find_by_id(self, policy_id: str) -> Policy:
        model = self.db.get(PolicyModel, policy_id)
        if model is None:
            raise DomainError(ErrorKind.POLICY_NOT_FOUND).with_details("policy_id", policy_id)
        return policy_to_aggregate(model)

    async def find_by_resource_and_action(self, resource: str, action: str) -> List[Policy]:
        models = self.db.query(PolicyModel).filter(
            PolicyModel.resource_type == str(resource),
            PolicyModel.action == str(action)
        ).order_by(PolicyModel.priority.desc(), PolicyModel.id).all()
        return self._to_aggregates(models)

    async def find_all_active(self) -> List[Policy]:
        models = self.db.query(PolicyModel).filter(
            PolicyModel.is_active.is_(True)
        ).order_by(PolicyModel.priority.desc(), PolicyModel.id).all()
        return self._to_aggregates(models)

    async def delete(self, policy_id: str) -> None:
        with self._transaction() as db:
            deleted = db.query(PolicyModel).filter(PolicyModel.id == policy_id).delete()
            if deleted == 0:
                raise DomainError(ErrorKind.POLICY_NOT_FOUND).with_details("policy_id", policy_id)

    async def count_by_resource(self, resource: str) -> int:
        return self.db.query(func.count(PolicyModel.id)).filter(
            PolicyModel.resource_type == str(resource)
        ).scalar() or 0
