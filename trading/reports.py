# trading/reports.py
"""
Read-only aggregations over produce, sales and credit sales.

Every function returns plain dicts/lists ready for a JSON response; sums of
empty groups come back as 0 rather than null.
"""
from __future__ import annotations

from datetime import date, datetime, time, timedelta
from typing import Optional

from django.conf import settings
from django.db.models import BigIntegerField, Count, ExpressionWrapper, F, IntegerField, Sum, Value
from django.db.models.functions import Coalesce, ExtractMonth, ExtractWeekDay, ExtractYear
from django.utils import timezone

from .models import Credit, Produce, Sale

ZERO = Value(0)


def _sum(field):
    return Coalesce(Sum(field), ZERO, output_field=BigIntegerField())


def _sales_by_produce_name(qs, limit: Optional[int] = None):
    rows = (
        qs.filter(produce__name__isnull=False)
        .values("produce__name")
        .annotate(totalSales=_sum("amount_paid"), totalTonnage=_sum("tonnage"), count=Count("id"))
        .order_by("-totalSales", "produce__name")
    )
    if limit:
        rows = rows[:limit]
    return [
        {"produce": r["produce__name"], "totalSales": r["totalSales"],
         "totalTonnage": r["totalTonnage"], "count": r["count"]}
        for r in rows
    ]


def _sales_by_branch(qs):
    rows = (
        qs.values("branch")
        .annotate(totalSales=_sum("amount_paid"), totalTonnage=_sum("tonnage"), count=Count("id"))
        .order_by("branch")
    )
    return [
        {"branch": r["branch"], "totalSales": r["totalSales"],
         "totalTonnage": r["totalTonnage"], "count": r["count"]}
        for r in rows
    ]


def start_of_week(today: Optional[date] = None) -> datetime:
    """Sunday 00:00 local time of the week containing ``today``."""
    today = today or timezone.localdate()
    sunday = today - timedelta(days=(today.weekday() + 1) % 7)
    return timezone.make_aware(datetime.combine(sunday, time.min))


# ---------------- director dashboard ----------------

def dashboard() -> dict:
    sales = Sale.objects.all()

    outstanding = ExpressionWrapper(F("amount_due") - F("amount_paid"), output_field=IntegerField())
    outstanding_rows = (
        Credit.objects.exclude(status=Credit.PAID)
        .values("branch")
        .annotate(totalOutstanding=_sum(outstanding), count=Count("id"))
        .order_by("branch")
    )

    stock_rows = (
        Produce.objects.values("branch")
        .annotate(totalStock=_sum("current_stock"), produceCount=Count("id"))
        .order_by("branch")
    )

    monthly_rows = (
        sales.annotate(year=ExtractYear("created_at"), month=ExtractMonth("created_at"))
        .values("year", "month")
        .annotate(totalSales=_sum("amount_paid"))
        .order_by("year", "month")
    )

    return {
        "salesByBranch": _sales_by_branch(sales),
        "salesByProduce": _sales_by_produce_name(sales, settings.TOP_PRODUCE_LIMIT),
        "outstandingCredit": [
            {"branch": r["branch"], "totalOutstanding": r["totalOutstanding"], "count": r["count"]}
            for r in outstanding_rows
        ],
        "stockByBranch": [
            {"branch": r["branch"], "totalStock": r["totalStock"], "produceCount": r["produceCount"]}
            for r in stock_rows
        ],
        "monthlySalesTrend": [
            {"year": r["year"], "month": r["month"], "totalSales": r["totalSales"]}
            for r in monthly_rows
        ],
    }


# ---------------- branch manager report ----------------

def branch_report(branch: str, today: Optional[date] = None) -> dict:
    sales = Sale.objects.filter(branch=branch)
    today = today or timezone.localdate()

    daily_rows = (
        sales.filter(created_at__gte=start_of_week(today))
        .annotate(day=ExtractWeekDay("created_at"))   # 1 = Sunday ... 7 = Saturday
        .values("day")
        .annotate(totalSales=_sum("amount_paid"))
        .order_by("day")
    )

    stock_levels = (
        Produce.objects.filter(branch=branch)
        .order_by("current_stock", "id")
        .values("id", "name", "type", "current_stock", "tonnage")
    )

    upcoming = (
        Credit.objects.filter(branch=branch, due_date__gte=today)
        .exclude(status=Credit.PAID)
        .order_by("due_date", "id")
        .values("id", "buyer_name", "amount_due", "amount_paid", "due_date")[: settings.UPCOMING_DUE_LIMIT]
    )

    agent_rows = (
        sales.filter(sales_agent__name__isnull=False)
        .values("sales_agent_id", "sales_agent__name")
        .annotate(totalSales=_sum("amount_paid"), saleCount=Count("id"))
        .order_by("-totalSales", "sales_agent_id")
    )

    return {
        "branch": branch,
        "dailySales": [{"day": r["day"], "totalSales": r["totalSales"]} for r in daily_rows],
        "topProducts": _sales_by_produce_name(sales, settings.TOP_PRODUCE_LIMIT),
        "stockLevels": [
            {"id": p["id"], "name": p["name"], "type": p["type"],
             "currentStock": p["current_stock"], "tonnage": p["tonnage"]}
            for p in stock_levels
        ],
        "upcomingDueDates": [
            {"id": c["id"], "buyerName": c["buyer_name"], "amountDue": c["amount_due"],
             "amountPaid": c["amount_paid"], "dueDate": c["due_date"].isoformat()}
            for c in upcoming
        ],
        "agentPerformance": [
            {"agentId": r["sales_agent_id"], "name": r["sales_agent__name"],
             "totalSales": r["totalSales"], "saleCount": r["saleCount"]}
            for r in agent_rows
        ],
    }


# ---------------- sales summaries ----------------

def summarize(qs) -> dict:
    agg = qs.aggregate(totalSales=_sum("amount_paid"), totalTonnage=_sum("tonnage"), saleCount=Count("id"))
    return {"totalSales": agg["totalSales"], "totalTonnage": agg["totalTonnage"], "saleCount": agg["saleCount"]}


def sales_summary() -> dict:
    sales = Sale.objects.all()
    return {
        "branchSummary": _sales_by_branch(sales),
        "produceSummary": _sales_by_produce_name(sales),
        "overallSummary": summarize(sales),
    }


def filter_sales(qs, *, branch: Optional[str] = None,
                 start: Optional[date] = None, end: Optional[date] = None):
    if branch:
        qs = qs.filter(branch=branch)
    if start and end:
        qs = qs.filter(created_at__date__gte=start, created_at__date__lte=end)
    return qs


def sales_report(*, branch: Optional[str] = None,
                 start: Optional[date] = None, end: Optional[date] = None):
    """(queryset of matching sales, newest first; summary dict)"""
    qs = filter_sales(
        Sale.objects.select_related("produce", "sales_agent"),
        branch=branch, start=start, end=end,
    ).order_by("-created_at", "-id")
    return qs, summarize(qs)
