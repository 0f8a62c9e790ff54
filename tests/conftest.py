"""
Pytest configuration and fixtures for the produce trading backend.
"""

import pytest
from rest_framework.test import APIClient

from trading.models import DIRECTOR, MAGANJO, MANAGER, MATUGGA, SALES_AGENT, Produce, User
from trading.policy import Actor


@pytest.fixture
def api_client():
    """
    Fixture for an unauthenticated Django REST framework API client.
    """
    return APIClient()


@pytest.fixture
def make_user(db):
    counter = {"n": 0}

    def _make(role=SALES_AGENT, branch=MAGANJO, **extra):
        counter["n"] += 1
        extra.setdefault("name", f"{role.replace('_', ' ').title()} {counter['n']}")
        extra.setdefault("contact", "0772123456")
        return User.objects.create_user(
            email=f"{role}{counter['n']}@{branch.lower()}.example.com",
            password="secret123",
            role=role,
            branch=branch,
            **extra,
        )

    return _make


@pytest.fixture
def manager(make_user):
    return make_user(MANAGER, MAGANJO, name="Grace Manager")


@pytest.fixture
def agent(make_user):
    return make_user(SALES_AGENT, MAGANJO, name="Peter Agent")


@pytest.fixture
def other_agent(make_user):
    return make_user(SALES_AGENT, MATUGGA, name="Sarah Agent")


@pytest.fixture
def other_manager(make_user):
    return make_user(MANAGER, MATUGGA, name="John Manager")


@pytest.fixture
def director(make_user):
    return make_user(DIRECTOR, MAGANJO, name="Mr Orban")


@pytest.fixture
def actor():
    """Build the per-request credential context for a user."""
    return Actor.from_user


@pytest.fixture
def client_for():
    """Return an API client authenticated as the given user."""

    def _client(user):
        client = APIClient()
        client.force_authenticate(user=user)
        return client

    return _client


@pytest.fixture
def make_produce(db):
    def _make(branch=MAGANJO, tonnage=100, manager=None, **extra):
        fields = {
            "name": "Beans",
            "type": "Legume",
            "cost": 50000,
            "selling_price": 60000,
            "dealer": "Kato Traders",
            "dealer_contact": "0701234567",
            "source": Produce.COMPANY,
        }
        fields.update(extra)
        return Produce.objects.create(branch=branch, tonnage=tonnage, manager=manager, **fields)

    return _make


@pytest.fixture
def beans(make_produce, manager):
    return make_produce(MAGANJO, 100, manager=manager, name="Beans")
