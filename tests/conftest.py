import os

# Settings refuse the default JWT secret outside debug mode.
os.environ.setdefault("DEBUG", "true")

import pytest

from tests.fakes import (
    InMemoryAssignments,
    InMemoryAttendance,
    InMemoryClasses,
    InMemoryStorage,
    InMemorySubmissions,
    InMemoryUsers,
)


@pytest.fixture
def users():
    return InMemoryUsers()


@pytest.fixture
def classes():
    return InMemoryClasses()


@pytest.fixture
def attendance():
    return InMemoryAttendance()


@pytest.fixture
def assignments():
    return InMemoryAssignments()


@pytest.fixture
def submissions():
    return InMemorySubmissions()


@pytest.fixture
def storage():
    return InMemoryStorage()
