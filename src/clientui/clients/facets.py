"""
Facet provider contract and operation keys.

A detail page is composed of three independently fetched facets: the patient
(entity), its notes (dependent collection) and its risk level (derived
classification). Any object with the three `fetch_*` methods below can feed the
recovery orchestrator; the gateway client is the production one, tests use fakes.

Operation keys name every remote call. They end up on `ClassifiedError.source_operation`
and their scope tells the orchestrator what kind of page was being built.
"""

from enum import Enum
from typing import Protocol, runtime_checkable

from clientui.models.beans import Note, Patient, RiskLevel


class OperationScope(str, Enum):
    LISTING = "listing"     # collection query, no identity needed
    ENTITY = "entity"       # about one existing patient, needs its id
    CREATION = "creation"   # creates a patient, has no id yet


class Operation(str, Enum):
    LIST_PATIENTS = "patients.list"
    GET_PATIENT = "patients.get"
    ADD_PATIENT = "patients.create"
    UPDATE_PATIENT = "patients.update"
    LIST_NOTES = "notes.list"
    ADD_NOTE = "notes.create"
    GET_RISK = "risk.get"

    @property
    def scope(self) -> OperationScope:
        return OPERATION_SCOPES[self]


OPERATION_SCOPES: dict[Operation, OperationScope] = {
    Operation.LIST_PATIENTS: OperationScope.LISTING,
    Operation.GET_PATIENT: OperationScope.ENTITY,
    Operation.ADD_PATIENT: OperationScope.CREATION,
    Operation.UPDATE_PATIENT: OperationScope.ENTITY,
    Operation.LIST_NOTES: OperationScope.ENTITY,
    Operation.ADD_NOTE: OperationScope.ENTITY,
    Operation.GET_RISK: OperationScope.ENTITY,
}


def scope_of(operation_key: str) -> OperationScope:
    """
    Scope of an operation key. Unknown keys are treated as entity-specific,
    the scope that demands the most context before anything is re-rendered.
    """
    try:
        return Operation(operation_key).scope
    except ValueError:
        return OperationScope.ENTITY


@runtime_checkable
class FacetProvider(Protocol):
    """
    Source of the three facets of a patient detail page.

    Each method performs exactly one remote call and raises
    `clientui.exceptions.ClassifiableFailure` when it fails.
    """

    def fetch_entity(self, entity_id: int) -> Patient: ...

    def fetch_dependents(self, entity_id: int) -> list[Note]: ...

    def fetch_derived(self, entity_id: int) -> RiskLevel: ...


__all__ = ["OperationScope", "Operation", "OPERATION_SCOPES", "scope_of", "FacetProvider"]
