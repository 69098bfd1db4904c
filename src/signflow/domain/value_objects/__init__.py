"""Domain value objects."""

from signflow.domain.value_objects.actor import Actor, ActorRole
from signflow.domain.value_objects.conditional_logic import (
    Combinator,
    CompoundCondition,
    Condition,
    ConditionalLogic,
    ConditionOperator,
)
from signflow.domain.value_objects.decline_policy import DeclinePolicy
from signflow.domain.value_objects.document_extensions import DocumentExtensions
from signflow.domain.value_objects.document_status import DocumentStatus
from signflow.domain.value_objects.field_type import FieldType
from signflow.domain.value_objects.field_validation_error import (
    FieldValidationError,
    Severity,
)
from signflow.domain.value_objects.signer_status import SignerStatus
from signflow.domain.value_objects.signing_progress import SigningProgress
from signflow.domain.value_objects.validation_rule import RuleKind, ValidationRule
from signflow.domain.value_objects.workflow_event import WorkflowEvent, WorkflowEventType

__all__ = [
    "Actor",
    "ActorRole",
    "Combinator",
    "CompoundCondition",
    "Condition",
    "ConditionOperator",
    "ConditionalLogic",
    "DeclinePolicy",
    "DocumentExtensions",
    "DocumentStatus",
    "FieldType",
    "FieldValidationError",
    "RuleKind",
    "Severity",
    "SignerStatus",
    "SigningProgress",
    "ValidationRule",
    "WorkflowEvent",
    "WorkflowEventType",
]
