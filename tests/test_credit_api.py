"""
Tests for credit sale endpoints and the payment flow.
"""

from datetime import timedelta

import pytest
from django.utils import timezone
from rest_framework import status

from trading.models import Credit, Produce


def credit_payload(produce, **extra):
    payload = {
        "produceId": produce.pk,
        "tonnage": 10,
        "amountDue": 50000,
        "buyerName": "Nakato",
        "nationalId": "CM90012345ABCD",
        "location": "Gayaza",
        "contact": "0772123456",
        "dueDate": "2030-06-30",
    }
    payload.update(extra)
    return payload


def make_credit(produce, agent, due_in_days=30, **extra):
    fields = {
        "produce": produce, "sales_agent": agent, "branch": produce.branch,
        "tonnage": 1, "amount_due": 50000, "buyer_name": "Nakato",
        "national_id": "CM90012345ABCD", "location": "Gayaza", "contact": "0772123456",
        "due_date": timezone.localdate() + timedelta(days=due_in_days),
    }
    fields.update(extra)
    return Credit.objects.create(**fields)


@pytest.mark.django_db
class TestCreateCredit:
    def test_create_credit(self, client_for, agent, beans):
        response = client_for(agent).post("/api/credit", credit_payload(beans), format="json")

        assert response.status_code == status.HTTP_201_CREATED
        body = response.json()
        assert body["status"] == "Pending"
        assert body["amountPaid"] == 0
        assert body["balance"] == 50000
        assert body["dueDate"] == "2030-06-30"
        assert body["nationalId"] == "CM90012345ABCD"
        assert body["salesAgent"]["id"] == agent.pk
        assert Produce.objects.get(pk=beans.pk).current_stock == 90

    def test_due_date_with_time_component(self, client_for, agent, beans):
        response = client_for(agent).post(
            "/api/credit", credit_payload(beans, dueDate="2030-06-30T00:00:00.000Z"), format="json",
        )
        assert response.status_code == status.HTTP_201_CREATED
        assert response.json()["dueDate"] == "2030-06-30"

    def test_invalid_national_id(self, client_for, agent, beans):
        response = client_for(agent).post("/api/credit", credit_payload(beans, nationalId="12345"), format="json")
        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json()["errors"] == [
            {"field": "nationalId", "message": "Please enter a valid National ID number"},
        ]

    def test_insufficient_stock(self, client_for, agent, beans):
        response = client_for(agent).post("/api/credit", credit_payload(beans, tonnage=101), format="json")
        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json()["available"] == 100
        assert Credit.objects.count() == 0

    def test_other_branch(self, client_for, other_agent, beans):
        response = client_for(other_agent).post("/api/credit", credit_payload(beans), format="json")
        assert response.status_code == status.HTTP_403_FORBIDDEN


@pytest.mark.django_db
class TestPayment:
    def test_payment_flow(self, client_for, agent, beans):
        client = client_for(agent)
        credit_id = client.post("/api/credit", credit_payload(beans), format="json").json()["id"]

        first = client.put(f"/api/credit/{credit_id}/payment", {"amountPaid": 20000}, format="json")
        assert first.status_code == status.HTTP_200_OK
        assert (first.json()["amountPaid"], first.json()["status"]) == (20000, "Partial")

        second = client.put(f"/api/credit/{credit_id}/payment", {"amountPaid": 30000}, format="json")
        assert (second.json()["amountPaid"], second.json()["status"], second.json()["balance"]) == (50000, "Paid", 0)

    def test_missing_credit(self, client_for, agent):
        response = client_for(agent).put("/api/credit/5555/payment", {"amountPaid": 1000}, format="json")
        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.json()["message"] == "Credit sale not found"

    def test_invalid_amount(self, client_for, agent, beans):
        credit = make_credit(beans, agent)
        response = client_for(agent).put(f"/api/credit/{credit.pk}/payment", {"amountPaid": 0}, format="json")
        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_other_branch(self, client_for, agent, other_agent, beans):
        credit = make_credit(beans, agent)
        response = client_for(other_agent).put(f"/api/credit/{credit.pk}/payment", {"amountPaid": 1000}, format="json")
        assert response.status_code == status.HTTP_403_FORBIDDEN
        assert response.json()["message"] == "Not authorized to update credit sales from other branches"


@pytest.mark.django_db
class TestListCredit:
    def test_list_ordered_by_due_date_and_scoped(self, client_for, agent, other_agent, beans, make_produce):
        make_credit(beans, agent, due_in_days=20, buyer_name="Later")
        make_credit(beans, agent, due_in_days=5, buyer_name="Sooner")
        rice = make_produce("Matugga", 50, name="Rice")
        make_credit(rice, other_agent, buyer_name="Elsewhere")

        response = client_for(agent).get("/api/credit")
        assert [c["buyerName"] for c in response.json()] == ["Sooner", "Later"]

    def test_status_filter(self, client_for, agent, beans):
        make_credit(beans, agent, buyer_name="Open")
        make_credit(beans, agent, buyer_name="Settled", amount_paid=50000)

        response = client_for(agent).get("/api/credit", {"status": "Paid"})
        assert [c["buyerName"] for c in response.json()] == ["Settled"]

    def test_unknown_status(self, client_for, agent):
        assert client_for(agent).get("/api/credit", {"status": "Lost"}).status_code == status.HTTP_400_BAD_REQUEST

    def test_overdue(self, client_for, manager, agent, beans):
        make_credit(beans, agent, due_in_days=-3, buyer_name="Late")
        make_credit(beans, agent, due_in_days=-3, buyer_name="LateButPaid", amount_paid=50000)
        make_credit(beans, agent, due_in_days=3, buyer_name="NotYet")

        response = client_for(manager).get("/api/credit/overdue")
        assert [c["buyerName"] for c in response.json()] == ["Late"]
