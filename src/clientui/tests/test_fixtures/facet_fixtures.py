"""Fixtures for classifier and recovery tests: sample facets and a scriptable provider."""

from datetime import date

import pytest

from clientui.exceptions.base import ClassifiableFailure
from clientui.models.beans import Note, Patient, RiskLevel


class FakeFacetProvider:
    """
    In-memory FacetProvider.

    Each facet is either a value to return or a ClassifiableFailure to raise.
    Every call is recorded in `calls` as `(facet, entity_id)` so tests can assert
    the fetch order and that nothing was fetched at all.
    """

    def __init__(self, entity=None, dependents=None, derived=None):
        self.entity = entity
        self.dependents = dependents if dependents is not None else []
        self.derived = derived
        self.calls: list[tuple[str, int]] = []

    def _answer(self, facet: str, entity_id: int, value):
        self.calls.append((facet, entity_id))
        if isinstance(value, ClassifiableFailure):
            raise value
        return value

    def fetch_entity(self, entity_id: int) -> Patient:
        return self._answer("entity", entity_id, self.entity)

    def fetch_dependents(self, entity_id: int) -> list[Note]:
        return self._answer("dependents", entity_id, self.dependents)

    def fetch_derived(self, entity_id: int) -> RiskLevel:
        return self._answer("derived", entity_id, self.derived)

    @property
    def fetched(self) -> list[str]:
        return [facet for facet, _ in self.calls]


@pytest.fixture
def patient() -> Patient:
    """A complete patient, as the patient service returns it."""
    return Patient(
        id=1,
        lastname="TestNone",
        firstname="Test",
        dateofbirth=date(1966, 12, 31),
        gender="F",
        address="1 Brookside St",
        phone="100-222-3333",
    )


@pytest.fixture
def notes(patient: Patient) -> list[Note]:
    return [
        Note(pat_id=patient.id, patient=patient.lastname, note="Patient states that they feel well."),
        Note(pat_id=patient.id, patient=patient.lastname, note="Weight at or below recommended level."),
    ]


@pytest.fixture
def risk(patient: Patient) -> RiskLevel:
    return RiskLevel(risk_level="None", pat_id=patient.id)


@pytest.fixture
def facets(patient: Patient, notes: list[Note], risk: RiskLevel) -> FakeFacetProvider:
    """A provider whose three facets all succeed."""
    return FakeFacetProvider(entity=patient, dependents=notes, derived=risk)
