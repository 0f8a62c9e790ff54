"""
Tests for the explicit per-entity validation functions.
"""

from datetime import date

import pytest
from rest_framework import serializers

from trading.models import Credit
from trading.validators import (
    MAX_KG,
    MAX_UGX,
    validate_credit,
    validate_payment,
    validate_price,
    validate_produce,
    validate_restock,
    validate_sale,
    validate_user,
)


def fields(result):
    return {e.field for e in result.errors}


def messages(result):
    return {e.field: e.message for e in result.errors}


@pytest.fixture
def produce_data():
    return {
        "name": "Maize",
        "type": "Grain",
        "tonnage": 500,
        "cost": 200000,
        "selling_price": 250000,
        "dealer": "Kato Traders",
        "dealer_contact": "+256772123456",
        "branch": "Maganjo",
        "source": "Own Farm",
    }


@pytest.fixture
def credit_data():
    return {
        "produce_id": 1,
        "tonnage": 10,
        "amount_due": 50000,
        "buyer_name": "Okello",
        "national_id": "CM12345678ABCD",
        "location": "Wakiso",
        "contact": "0772123456",
        "due_date": date(2030, 1, 31),
    }


class TestUserValidation:
    def test_valid_user(self):
        result = validate_user({
            "name": "Jane", "email": "jane@example.com", "password": "secret1",
            "role": "manager", "branch": "Matugga", "contact": "0701234567",
        })
        assert result.ok

    def test_every_missing_field_is_reported(self):
        result = validate_user({})
        assert fields(result) == {"name", "email", "password", "role", "branch", "contact"}
        assert messages(result)["email"] == "Email is required"

    def test_bad_values(self):
        result = validate_user({
            "name": "J", "email": "not-an-email", "password": "123",
            "role": "owner", "branch": "Kampala", "contact": "12345",
        })
        errors = messages(result)
        assert errors["name"] == "Name must be at least 2 characters"
        assert errors["email"] == "Please enter a valid email address"
        assert errors["password"] == "Password must be at least 6 characters"
        assert errors["role"].startswith("Role must be one of")
        assert errors["branch"].startswith("Branch must be one of")
        assert errors["contact"] == "Please enter a valid Ugandan phone number"


class TestProduceValidation:
    def test_valid_produce(self, produce_data):
        assert validate_produce(produce_data).ok

    def test_source_is_optional(self, produce_data):
        del produce_data["source"]
        assert validate_produce(produce_data).ok

    def test_minimums(self, produce_data):
        produce_data.update(tonnage=2, cost=9999, selling_price=5000)
        errors = messages(validate_produce(produce_data))
        assert errors == {
            "tonnage": "Tonnage must be at least 3 kg",
            "cost": "Cost must be at least 10,000 UGX",
            "sellingPrice": "Selling price must be at least 10,000 UGX",
        }

    def test_type_letters_only(self, produce_data):
        produce_data["type"] = "Grain2"
        assert messages(validate_produce(produce_data)) == {"type": "Type must contain only alphabets"}

    @pytest.mark.parametrize("contact", ["0772123456", "+256772123456"])
    def test_phone_formats_accepted(self, produce_data, contact):
        produce_data["dealer_contact"] = contact
        assert validate_produce(produce_data).ok

    @pytest.mark.parametrize("contact", ["772123456", "+25677212345", "07721234567", "0772-12345"])
    def test_phone_formats_rejected(self, produce_data, contact):
        produce_data["dealer_contact"] = contact
        assert fields(validate_produce(produce_data)) == {"dealerContact"}

    def test_whole_numbers_only(self, produce_data):
        produce_data.update(tonnage=12.5, cost=True)
        assert fields(validate_produce(produce_data)) == {"tonnage", "cost"}


class TestSaleAndCreditValidation:
    def test_valid_sale(self):
        assert validate_sale({"produce_id": 3, "tonnage": 1, "amount_paid": 10000, "buyer_name": "Ann"}).ok

    def test_sale_minimums(self):
        errors = messages(validate_sale({"produce_id": 3, "tonnage": 0, "amount_paid": 9000, "buyer_name": "A"}))
        assert errors == {
            "tonnage": "Tonnage must be at least 1 kg",
            "amountPaid": "Amount must be at least 10,000 UGX",
            "buyerName": "Buyer name must be at least 2 characters",
        }

    def test_valid_credit(self, credit_data):
        assert validate_credit(credit_data).ok

    @pytest.mark.parametrize("national_id", ["CM1234567890", "cm12345678ABCD", "XM12345678ABCD", "CM12345678abcd"])
    def test_national_id_format(self, credit_data, national_id):
        credit_data["national_id"] = national_id
        assert messages(validate_credit(credit_data)) == {"nationalId": "Please enter a valid National ID number"}

    def test_due_date_must_be_a_date(self, credit_data):
        credit_data["due_date"] = "tomorrow"
        assert fields(validate_credit(credit_data)) == {"dueDate"}

    def test_missing_produce(self, credit_data):
        del credit_data["produce_id"]
        assert messages(validate_credit(credit_data)) == {"produceId": "Produce is required"}


class TestAmountValidation:
    def test_payment(self):
        assert validate_payment({"amount_paid": 1}).ok
        assert fields(validate_payment({"amount_paid": 0})) == {"amountPaid"}
        assert fields(validate_payment({})) == {"amountPaid"}

    def test_restock(self):
        assert validate_restock({"additional_stock": 5}).ok
        assert fields(validate_restock({"additional_stock": -1})) == {"additionalStock"}

    def test_price(self):
        assert validate_price({"selling_price": 10000}).ok
        assert fields(validate_price({"selling_price": 9999})) == {"sellingPrice"}


class TestColumnRanges:
    def test_kg_and_ugx_limits_are_inclusive(self, produce_data):
        produce_data.update(tonnage=MAX_KG, cost=MAX_UGX, selling_price=MAX_UGX)
        assert validate_produce(produce_data).ok

    def test_produce_overflow(self, produce_data):
        produce_data.update(tonnage=MAX_KG + 1, cost=10 ** 20, selling_price=MAX_UGX + 1)
        errors = messages(validate_produce(produce_data))
        assert errors == {
            "tonnage": "Tonnage must not exceed 2,147,483,647",
            "cost": "Cost must not exceed 9,223,372,036,854,775,807",
            "sellingPrice": "Selling price must not exceed 9,223,372,036,854,775,807",
        }

    def test_sale_overflow(self):
        result = validate_sale({"produce_id": 10 ** 20, "tonnage": 10 ** 20, "amount_paid": 10 ** 20, "buyer_name": "Ann"})
        assert fields(result) == {"produceId", "tonnage", "amountPaid"}

    def test_credit_overflow(self, credit_data):
        credit_data.update(tonnage=MAX_KG + 1, amount_due=10 ** 20)
        assert fields(validate_credit(credit_data)) == {"tonnage", "amountDue"}

    def test_amount_overflow(self):
        assert fields(validate_payment({"amount_paid": MAX_UGX + 1})) == {"amountPaid"}
        assert fields(validate_restock({"additional_stock": MAX_KG + 1})) == {"additionalStock"}
        assert fields(validate_price({"selling_price": 10 ** 20})) == {"sellingPrice"}


def test_raise_for_errors_groups_messages_by_field():
    result = validate_sale({})
    with pytest.raises(serializers.ValidationError) as exc:
        result.raise_for_errors()
    assert set(exc.value.detail) == {"produceId", "tonnage", "amountPaid", "buyerName"}


@pytest.mark.parametrize(
    "paid, due, status",
    [
        (0, 50000, Credit.PENDING),
        (20000, 50000, Credit.PARTIAL),
        (50000, 50000, Credit.PAID),
        (60000, 50000, Credit.PAID),
    ],
)
def test_credit_status_derivation(paid, due, status):
    assert Credit.derive_status(paid, due) == status
    credit = Credit(amount_paid=paid, amount_due=due, status=Credit.PENDING)
    assert credit.balance == max(due - paid, 0)
