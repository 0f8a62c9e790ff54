"""
Tests for stock-adjusting sale and credit origination.
"""

from datetime import date

import pytest
from rest_framework import exceptions

from trading import services
from trading.exceptions import InsufficientStock
from trading.models import MATUGGA, Credit, Produce, Sale


def sale_data(produce, tonnage=10, **extra):
    data = {"produce_id": produce.pk, "tonnage": tonnage, "amount_paid": 600000, "buyer_name": "Okello"}
    data.update(extra)
    return data


def credit_data(produce, tonnage=10, **extra):
    data = {
        "produce_id": produce.pk,
        "tonnage": tonnage,
        "amount_due": 50000,
        "buyer_name": "Nakato",
        "national_id": "CM90012345ABCD",
        "location": "Gayaza",
        "contact": "0772123456",
        "due_date": date(2030, 6, 30),
    }
    data.update(extra)
    return data


def stock_of(produce):
    return Produce.objects.values_list("current_stock", flat=True).get(pk=produce.pk)


@pytest.mark.django_db
class TestOriginateSale:
    def test_sale_decrements_stock(self, agent, actor, beans):
        sale = services.originate_sale(actor(agent), sale_data(beans, 30))

        assert stock_of(beans) == 70
        assert sale.branch == beans.branch
        assert sale.sales_agent_id == agent.pk
        assert sale.produce_id == beans.pk
        assert sale.tonnage == 30

    def test_selling_everything_leaves_zero(self, agent, actor, beans):
        services.originate_sale(actor(agent), sale_data(beans, 100))
        assert stock_of(beans) == 0

    def test_insufficient_stock_changes_nothing(self, agent, actor, beans):
        with pytest.raises(InsufficientStock) as exc:
            services.originate_sale(actor(agent), sale_data(beans, 101))

        assert exc.value.available == 100
        assert str(exc.value.detail) == "Insufficient stock. Available: 100kg"
        assert stock_of(beans) == 100
        assert Sale.objects.count() == 0

    def test_unknown_produce(self, agent, actor):
        with pytest.raises(exceptions.NotFound):
            services.originate_sale(actor(agent), {
                "produce_id": 999999, "tonnage": 1, "amount_paid": 10000, "buyer_name": "Ann",
            })
        assert Sale.objects.count() == 0

    def test_other_branch_is_forbidden(self, other_agent, actor, beans):
        with pytest.raises(exceptions.PermissionDenied):
            services.originate_sale(actor(other_agent), sale_data(beans, 5))
        assert stock_of(beans) == 100

    def test_director_cannot_sell_from_another_branch(self, director, actor, make_produce):
        matugga_rice = make_produce(MATUGGA, 50, name="Rice")
        with pytest.raises(exceptions.PermissionDenied):
            services.originate_sale(actor(director), sale_data(matugga_rice, 5))

    def test_invalid_input_is_rejected_before_any_lookup(self, agent, actor, beans):
        with pytest.raises(exceptions.ValidationError):
            services.originate_sale(actor(agent), sale_data(beans, 0, amount_paid=500))
        assert stock_of(beans) == 100

    def test_lost_race_rolls_back_the_record(self, agent, actor, beans):
        def create_then_drain(produce):
            sale = Sale.objects.create(
                produce=produce, sales_agent_id=agent.pk, branch=produce.branch,
                tonnage=60, amount_paid=100000, buyer_name="Okello",
            )
            # a concurrent writer empties the stock between the check and the decrement
            Produce.objects.filter(pk=produce.pk).update(current_stock=10)
            return sale

        with pytest.raises(InsufficientStock) as exc:
            services._consume_stock(actor(agent), "sale.create", beans.pk, 60, create_then_drain)

        assert exc.value.available == 10
        assert Sale.objects.count() == 0
        assert stock_of(beans) == 100


@pytest.mark.django_db
class TestOriginateCredit:
    def test_credit_starts_pending_and_decrements_stock(self, agent, actor, beans):
        credit = services.originate_credit(actor(agent), credit_data(beans, 25))

        assert credit.status == Credit.PENDING
        assert credit.amount_paid == 0
        assert credit.balance == 50000
        assert credit.branch == beans.branch
        assert stock_of(beans) == 75

    def test_insufficient_stock(self, agent, actor, beans):
        services.originate_sale(actor(agent), sale_data(beans, 90))
        with pytest.raises(InsufficientStock) as exc:
            services.originate_credit(actor(agent), credit_data(beans, 11))

        assert exc.value.available == 10
        assert Credit.objects.count() == 0
        assert stock_of(beans) == 10

    def test_stock_conservation_across_records(self, agent, manager, actor, beans):
        services.originate_sale(actor(agent), sale_data(beans, 20))
        services.originate_credit(actor(manager), credit_data(beans, 15))
        services.originate_sale(actor(manager), sale_data(beans, 5))

        sold = sum(Sale.objects.values_list("tonnage", flat=True))
        credited = sum(Credit.objects.values_list("tonnage", flat=True))
        assert stock_of(beans) == beans.tonnage - sold - credited == 60
