"""
Explicit per-entity validation.

Each ``validate_*`` function takes a plain dict keyed by model attribute
names and returns a ``ValidationResult``; nothing is written until the result
is ``ok``. Field names in the reported errors use the API's wire spelling so
the client can attach them to form inputs.
"""
from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Iterable, Optional

from rest_framework import serializers

from .models import BRANCHES, ROLES, Produce

UGANDA_PHONE = re.compile(r"^(\+256|0)[0-9]{9}$")
NATIONAL_ID = re.compile(r"^CM[A-Z0-9]{12}$")
LETTERS_ONLY = re.compile(r"^[a-zA-Z\s]+$")
EMAIL = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")

MIN_AMOUNT = 10000   # UGX

# column ranges: PositiveIntegerField for kg, PositiveBigIntegerField for UGX and ids
MAX_KG = 2147483647
MAX_UGX = 9223372036854775807


@dataclass(frozen=True)
class FieldError:
    field: str
    message: str

    def as_dict(self) -> dict:
        return {"field": self.field, "message": self.message}


@dataclass
class ValidationResult:
    errors: list[FieldError] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors

    def add(self, field_name: str, message: str) -> None:
        self.errors.append(FieldError(field_name, message))

    def as_detail(self) -> dict:
        detail: dict[str, list[str]] = {}
        for err in self.errors:
            detail.setdefault(err.field, []).append(err.message)
        return detail

    def raise_for_errors(self) -> None:
        if self.errors:
            raise serializers.ValidationError(self.as_detail())


@dataclass(frozen=True)
class Rule:
    attr: str
    wire: str
    label: str
    kind: str = "str"                     # str | int | date | choice | email
    required: bool = True
    min_length: Optional[int] = None
    minimum: Optional[int] = None
    minimum_message: Optional[str] = None
    maximum: Optional[int] = None
    pattern: Optional[re.Pattern] = None
    pattern_message: Optional[str] = None
    choices: Optional[Iterable[str]] = None


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def too_large(label: str, maximum: int) -> str:
    return f"{label} must not exceed {maximum:,}"


def _check(rule: Rule, value: Any, result: ValidationResult) -> None:
    if _is_blank(value):
        if rule.required:
            result.add(rule.wire, f"{rule.label} is required")
        return

    if rule.kind == "int":
        # bool is an int subclass; 12.0 from a JSON client is not a whole number here
        if isinstance(value, bool) or not isinstance(value, int):
            result.add(rule.wire, f"{rule.label} must be a whole number")
            return
        if rule.minimum is not None and value < rule.minimum:
            result.add(rule.wire, rule.minimum_message or f"{rule.label} must be at least {rule.minimum}")
        elif rule.maximum is not None and value > rule.maximum:
            result.add(rule.wire, too_large(rule.label, rule.maximum))
        return

    if rule.kind == "date":
        if not isinstance(value, (date, datetime)):
            result.add(rule.wire, f"{rule.label} must be a valid date")
        return

    if not isinstance(value, str):
        result.add(rule.wire, f"{rule.label} must be text")
        return

    if rule.kind == "choice":
        if value not in tuple(rule.choices or ()):
            result.add(rule.wire, f"{rule.label} must be one of: {', '.join(rule.choices or ())}")
        return

    if rule.kind == "email" and not EMAIL.match(value):
        result.add(rule.wire, "Please enter a valid email address")
        return

    if rule.min_length is not None and len(value.strip()) < rule.min_length:
        result.add(rule.wire, f"{rule.label} must be at least {rule.min_length} characters")
        return
    if rule.pattern is not None and not rule.pattern.match(value):
        result.add(rule.wire, rule.pattern_message or f"{rule.label} has an invalid format")


def run_rules(rules: Iterable[Rule], data: dict, *, partial: bool = False) -> ValidationResult:
    result = ValidationResult()
    for rule in rules:
        if partial and rule.attr not in data:
            continue
        _check(rule, data.get(rule.attr), result)
    return result


PHONE_MESSAGE = "Please enter a valid Ugandan phone number"

USER_RULES = (
    Rule("name", "name", "Name", min_length=2),
    Rule("email", "email", "Email", kind="email"),
    Rule("password", "password", "Password", min_length=6),
    Rule("role", "role", "Role", kind="choice", choices=ROLES),
    Rule("branch", "branch", "Branch", kind="choice", choices=BRANCHES),
    Rule("contact", "contact", "Contact number", pattern=UGANDA_PHONE, pattern_message=PHONE_MESSAGE),
)

PRODUCE_RULES = (
    Rule("name", "name", "Produce name", min_length=2),
    Rule("type", "type", "Produce type", min_length=2,
         pattern=LETTERS_ONLY, pattern_message="Type must contain only alphabets"),
    Rule("tonnage", "tonnage", "Tonnage", kind="int", minimum=3,
         minimum_message="Tonnage must be at least 3 kg", maximum=MAX_KG),
    Rule("cost", "cost", "Cost", kind="int", minimum=MIN_AMOUNT,
         minimum_message="Cost must be at least 10,000 UGX", maximum=MAX_UGX),
    Rule("selling_price", "sellingPrice", "Selling price", kind="int", minimum=MIN_AMOUNT,
         minimum_message="Selling price must be at least 10,000 UGX", maximum=MAX_UGX),
    Rule("dealer", "dealer", "Dealer name", min_length=2),
    Rule("dealer_contact", "dealerContact", "Dealer contact",
         pattern=UGANDA_PHONE, pattern_message=PHONE_MESSAGE),
    Rule("branch", "branch", "Branch name", kind="choice", choices=BRANCHES),
    Rule("source", "source", "Source", kind="choice", required=False,
         choices=[s for s, _ in Produce.SOURCE_CHOICES]),
)

SALE_RULES = (
    Rule("produce_id", "produceId", "Produce", kind="int", maximum=MAX_UGX),
    Rule("tonnage", "tonnage", "Tonnage", kind="int", minimum=1,
         minimum_message="Tonnage must be at least 1 kg", maximum=MAX_KG),
    Rule("amount_paid", "amountPaid", "Amount paid", kind="int", minimum=MIN_AMOUNT,
         minimum_message="Amount must be at least 10,000 UGX", maximum=MAX_UGX),
    Rule("buyer_name", "buyerName", "Buyer name", min_length=2),
)

CREDIT_RULES = (
    Rule("produce_id", "produceId", "Produce", kind="int", maximum=MAX_UGX),
    Rule("tonnage", "tonnage", "Tonnage", kind="int", minimum=1,
         minimum_message="Tonnage must be at least 1 kg", maximum=MAX_KG),
    Rule("amount_due", "amountDue", "Amount due", kind="int", minimum=MIN_AMOUNT,
         minimum_message="Amount must be at least 10,000 UGX", maximum=MAX_UGX),
    Rule("buyer_name", "buyerName", "Buyer name", min_length=2),
    Rule("national_id", "nationalId", "National ID",
         pattern=NATIONAL_ID, pattern_message="Please enter a valid National ID number"),
    Rule("location", "location", "Location", min_length=2),
    Rule("contact", "contact", "Contact number", pattern=UGANDA_PHONE, pattern_message=PHONE_MESSAGE),
    Rule("due_date", "dueDate", "Due date", kind="date"),
)

PAYMENT_RULES = (
    Rule("amount_paid", "amountPaid", "Payment amount", kind="int", minimum=1,
         minimum_message="Payment amount must be at least 1 UGX", maximum=MAX_UGX),
)

RESTOCK_RULES = (
    Rule("additional_stock", "additionalStock", "Additional stock", kind="int", minimum=1,
         minimum_message="Additional stock must be at least 1 kg", maximum=MAX_KG),
)

PRICE_RULES = (
    Rule("selling_price", "sellingPrice", "Selling price", kind="int", minimum=MIN_AMOUNT,
         minimum_message="Selling price must be at least 10,000 UGX", maximum=MAX_UGX),
)


def validate_user(data: dict) -> ValidationResult:
    return run_rules(USER_RULES, data)


def validate_produce(data: dict) -> ValidationResult:
    return run_rules(PRODUCE_RULES, data)


def validate_sale(data: dict) -> ValidationResult:
    return run_rules(SALE_RULES, data)


def validate_credit(data: dict) -> ValidationResult:
    return run_rules(CREDIT_RULES, data)


def validate_payment(data: dict) -> ValidationResult:
    return run_rules(PAYMENT_RULES, data)


def validate_restock(data: dict) -> ValidationResult:
    return run_rules(RESTOCK_RULES, data)


def validate_price(data: dict) -> ValidationResult:
    return run_rules(PRICE_RULES, data)
