# trading/services.py

from __future__ import annotations

import logging
from typing import Callable, Iterable, TypeVar

from django.conf import settings
from django.db import transaction
from django.db.models import ExpressionWrapper, F, FloatField
from django.utils import timezone
from rest_framework import exceptions

from .exceptions import InsufficientStock
from .models import Credit, Produce, Sale
from .policy import Actor, ensure_allowed
from .validators import (
    MAX_KG, MAX_UGX, ValidationResult, too_large,
    validate_credit, validate_payment, validate_price, validate_produce,
    validate_restock, validate_sale,
)

logger = logging.getLogger(__name__)

Record = TypeVar("Record", Sale, Credit)

PRODUCE_FIELDS = (
    "name", "type", "branch", "tonnage", "cost", "selling_price",
    "dealer", "dealer_contact", "source",
)
SALE_FIELDS = ("tonnage", "amount_paid", "buyer_name")
CREDIT_FIELDS = (
    "tonnage", "amount_due", "buyer_name", "national_id",
    "location", "contact", "due_date",
)


def _pick(data: dict, fields: Iterable[str]) -> dict:
    return {f: data[f] for f in fields if data.get(f) not in (None, "")}


def _ensure_fits(wire: str, label: str, total: int, maximum: int) -> None:
    if total > maximum:
        result = ValidationResult()
        result.add(wire, too_large(label, maximum))
        result.raise_for_errors()


def _locked(model, pk, label: str):
    obj = model.objects.select_for_update().filter(pk=pk).first()
    if obj is None:
        raise exceptions.NotFound(f"{label} not found")
    return obj


# ================== Produce ==================

def create_produce(actor: Actor, data: dict) -> Produce:
    data = dict(data)
    if not data.get("branch"):
        data["branch"] = actor.branch
    validate_produce(data).raise_for_errors()

    produce = Produce(**_pick(data, PRODUCE_FIELDS), manager_id=actor.user_id)
    produce.current_stock = produce.tonnage
    ensure_allowed(actor, "produce.create", produce)
    produce.save()
    logger.info("produce %s created: %s %skg at %s by user %s",
                produce.pk, produce.name, produce.tonnage, produce.branch, actor.user_id)
    return produce


@transaction.atomic
def restock_produce(actor: Actor, produce_id, data: dict) -> Produce:
    validate_restock(data).raise_for_errors()
    produce = _locked(Produce, produce_id, "Produce")
    ensure_allowed(actor, "produce.restock", produce)

    extra = data["additional_stock"]
    _ensure_fits("additionalStock", "Total tonnage", produce.tonnage + extra, MAX_KG)
    Produce.objects.filter(pk=produce.pk).update(
        tonnage=F("tonnage") + extra,
        current_stock=F("current_stock") + extra,
        updated_at=timezone.now(),
    )
    produce.refresh_from_db()
    logger.info("produce %s restocked by %skg (now %s/%s)",
                produce.pk, extra, produce.current_stock, produce.tonnage)
    return produce


@transaction.atomic
def reprice_produce(actor: Actor, produce_id, data: dict) -> Produce:
    validate_price(data).raise_for_errors()
    produce = _locked(Produce, produce_id, "Produce")
    ensure_allowed(actor, "produce.reprice", produce)

    produce.selling_price = data["selling_price"]
    produce.save(update_fields=["selling_price", "updated_at"])
    return produce


@transaction.atomic
def delete_produce(actor: Actor, produce_id) -> None:
    produce = _locked(Produce, produce_id, "Produce")
    ensure_allowed(actor, "produce.delete", produce)
    produce.delete()
    logger.info("produce %s deleted by user %s", produce_id, actor.user_id)


def low_stock_alerts(actor: Actor):
    """Produce in the caller's branch below LOW_STOCK_RATIO of its tonnage, lowest first."""
    threshold = ExpressionWrapper(F("tonnage") * settings.LOW_STOCK_RATIO, output_field=FloatField())
    return (
        Produce.objects
        .select_related("manager")
        .filter(branch=actor.branch)
        .alias(threshold=threshold)
        .filter(current_stock__lt=F("threshold"))
        .order_by("current_stock", "id")
    )


# ================== Stock-adjusting sales ==================

@transaction.atomic
def _consume_stock(actor: Actor, action: str, produce_id, tonnage: int,
                   create_record: Callable[[Produce], Record]) -> Record:
    """
    Originate a record against a produce and take its tonnage out of stock.

    The produce row is locked for the duration of the transaction and the
    decrement itself is conditional on the store still holding enough stock,
    so the record and the decrement commit together or not at all.
    """
    produce = Produce.objects.select_for_update().filter(pk=produce_id).first()
    if produce is None:
        raise exceptions.NotFound("Produce not found")

    ensure_allowed(actor, action, produce)

    if produce.current_stock < tonnage:
        logger.warning("%s rejected: produce %s has %skg, %skg requested",
                       action, produce.pk, produce.current_stock, tonnage)
        raise InsufficientStock(produce.current_stock, tonnage)

    record = create_record(produce)

    decremented = (
        Produce.objects
        .filter(pk=produce.pk, current_stock__gte=tonnage)
        .update(current_stock=F("current_stock") - tonnage, updated_at=timezone.now())
    )
    if not decremented:
        # stock moved after the read; raising here rolls the record back as well
        available = Produce.objects.filter(pk=produce.pk).values_list("current_stock", flat=True).first()
        logger.warning("%s lost the stock race on produce %s (%skg left)", action, produce.pk, available)
        raise InsufficientStock(available or 0, tonnage)

    logger.info("%s %s: %skg of produce %s at %s by user %s",
                action, record.pk, tonnage, produce.pk, produce.branch, actor.user_id)
    return record


def originate_sale(actor: Actor, data: dict) -> Sale:
    validate_sale(data).raise_for_errors()

    def create(produce: Produce) -> Sale:
        return Sale.objects.create(
            produce=produce,
            sales_agent_id=actor.user_id,
            branch=produce.branch,
            **_pick(data, SALE_FIELDS),
        )

    sale = _consume_stock(actor, "sale.create", data["produce_id"], data["tonnage"], create)
    return Sale.objects.select_related("produce", "sales_agent").get(pk=sale.pk)


def originate_credit(actor: Actor, data: dict) -> Credit:
    validate_credit(data).raise_for_errors()

    def create(produce: Produce) -> Credit:
        return Credit.objects.create(
            produce=produce,
            sales_agent_id=actor.user_id,
            branch=produce.branch,
            amount_paid=0,
            **_pick(data, CREDIT_FIELDS),
        )

    credit = _consume_stock(actor, "credit.create", data["produce_id"], data["tonnage"], create)
    return Credit.objects.select_related("produce", "sales_agent").get(pk=credit.pk)


# ================== Credit payments ==================

@transaction.atomic
def record_credit_payment(actor: Actor, credit_id, data: dict) -> Credit:
    """
    Add a payment to a credit sale and move its status along
    Pending -> Partial -> Paid. Paid credits still accept further payments.
    """
    validate_payment(data).raise_for_errors()
    credit = _locked(Credit, credit_id, "Credit sale")
    ensure_allowed(actor, "credit.pay", credit)

    _ensure_fits("amountPaid", "Total amount paid", credit.amount_paid + data["amount_paid"], MAX_UGX)
    credit.amount_paid += data["amount_paid"]
    credit.save(update_fields=["amount_paid", "status", "updated_at"])  # save() derives status
    logger.info("credit %s paid %s (%s/%s, %s)",
                credit.pk, data["amount_paid"], credit.amount_paid, credit.amount_due, credit.status)
    return Credit.objects.select_related("produce", "sales_agent").get(pk=credit.pk)
