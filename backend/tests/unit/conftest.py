"""Shared fixtures for record module unit tests."""

import pytest

from dairy_dashboard.application.services import SessionContext
from dairy_dashboard.domain.entities import EntityDefinition

from fakes import ADMIN, SUPERVISOR, FakeRecordGateway, make_definition, sample_rows


@pytest.fixture
def definition() -> EntityDefinition:
    return make_definition()


@pytest.fixture
def gateway() -> FakeRecordGateway:
    return FakeRecordGateway({"health-medicine-records": sample_rows()})


@pytest.fixture
def session() -> SessionContext:
    context = SessionContext()
    context.start(SUPERVISOR)
    return context


@pytest.fixture
def admin_session() -> SessionContext:
    context = SessionContext()
    context.start(ADMIN)
    return context
