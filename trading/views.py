# trading/views.py
# ============================================================
# Imports
# ============================================================
import logging

from django.conf import settings
from django.contrib.auth import authenticate
from django.db import IntegrityError, transaction
from django.utils import timezone
from django.utils.dateparse import parse_date, parse_datetime

from rest_framework import exceptions, filters, mixins, status, viewsets
from rest_framework.decorators import action, api_view, authentication_classes, permission_classes
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework_simplejwt.tokens import AccessToken

from . import reports, services
from .models import Credit, Produce, Sale, User
from .policy import Actor, PolicyPermission, branch_scope, ensure_allowed, policy_permission
from .serializers import (
    CreditInSerializer, CreditSerializer, LoginSerializer, PaymentSerializer,
    PriceSerializer, ProduceInSerializer, ProduceSerializer, RegisterSerializer,
    RestockSerializer, SaleInSerializer, SaleSerializer, UserSerializer,
)
from .validators import validate_user

logger = logging.getLogger(__name__)


# ============================================================
# helpers
# ============================================================
def _date_param(params, name):
    raw = (params.get(name) or "").strip()
    if not raw:
        return None
    try:
        value = parse_date(raw)
        if value is None:
            dt = parse_datetime(raw)
            value = dt.date() if dt else None
    except ValueError:
        value = None
    if value is None:
        raise exceptions.ValidationError({name: ["Enter a valid date (YYYY-MM-DD)."]})
    return value


def _date_range(params):
    """startDate/endDate only filter when both are given; endDate covers the whole day."""
    start, end = _date_param(params, "startDate"), _date_param(params, "endDate")
    if start and end:
        return start, end
    return None, None


def _input(serializer_class, request) -> dict:
    s = serializer_class(data=request.data)
    s.is_valid(raise_exception=True)
    return dict(s.validated_data)


class WireOrderingFilter(filters.OrderingFilter):
    """``?ordering=`` takes wire names; the view maps them with ``ordering_aliases``."""

    def get_ordering(self, request, queryset, view):
        aliases = getattr(view, "ordering_aliases", {})
        params = request.query_params.get(self.ordering_param)
        if params:
            ordering = []
            for term in (t.strip() for t in params.split(",")):
                field = aliases.get(term.lstrip("-"))
                if field:
                    ordering.append(f"-{field}" if term.startswith("-") else field)
            if ordering:
                return ordering
        return self.get_default_ordering(view)


class ActorMixin:
    """Builds the explicit per-request credential context from the authenticated user."""

    @property
    def actor(self) -> Actor:
        return Actor.from_user(self.request.user)


# ============================================================
# Auth
# ============================================================
def _auth_payload(user: User) -> dict:
    data = UserSerializer(user).data
    data["token"] = str(AccessToken.for_user(user))
    return data


@api_view(["POST"])
@authentication_classes([])
@permission_classes([AllowAny])
def register(request):
    data = _input(RegisterSerializer, request)
    data["email"] = (data.get("email") or "").strip().lower()
    validate_user(data).raise_for_errors()

    if User.objects.filter(email=data["email"]).exists():
        raise exceptions.ValidationError({"email": ["User already exists"]})
    try:
        with transaction.atomic():
            user = User.objects.create_user(
                email=data["email"], password=data["password"],
                name=data["name"].strip(), role=data["role"],
                branch=data["branch"], contact=data["contact"],
            )
    except IntegrityError:
        raise exceptions.ValidationError({"email": ["User already exists"]})

    logger.info("user %s registered as %s at %s", user.pk, user.role, user.branch)
    return Response(_auth_payload(user), status=status.HTTP_201_CREATED)


@api_view(["POST"])
@authentication_classes([])
@permission_classes([AllowAny])
def login(request):
    data = _input(LoginSerializer, request)
    user = authenticate(request, username=data["email"].strip().lower(), password=data["password"])
    if user is None:
        logger.warning("failed login for %s", data["email"])
        # no authenticators here, so DRF would turn AuthenticationFailed into a 403
        return Response(
            {"message": "Invalid email or password", "code": "authentication_failed"},
            status=status.HTTP_401_UNAUTHORIZED,
            headers={"WWW-Authenticate": 'Bearer realm="api"'},
        )
    return Response(_auth_payload(user))


@api_view(["GET"])
def profile(request):
    return Response(UserSerializer(request.user).data)


@api_view(["GET"])
@permission_classes([IsAuthenticated, policy_permission("user.list")])
def users(request):
    qs = User.objects.filter(is_active=True).order_by("branch", "name")
    return Response(UserSerializer(qs, many=True).data)


# ============================================================
# ProduceViewSet
# ============================================================
class ProduceViewSet(ActorMixin, mixins.ListModelMixin, viewsets.GenericViewSet):
    """
    /api/produce
      - branch=Matugga          # directors only; everyone else sees their own branch
      - search=beans
      - ordering=currentStock|-createdAt|sellingPrice|name
    """
    permission_classes = [IsAuthenticated, PolicyPermission]
    policy_actions = {
        "list": "produce.read",
        "retrieve": "produce.read",
        "create": "produce.create",
        "destroy": "produce.delete",
        "stock": "produce.restock",
        "price": "produce.reprice",
        "low_stock": "produce.low_stock",
    }

    queryset = Produce.objects.select_related("manager")
    serializer_class = ProduceSerializer
    lookup_value_regex = r"\d+"

    filter_backends = [filters.SearchFilter, WireOrderingFilter]
    search_fields = ["name", "type", "dealer"]
    ordering_aliases = {
        "createdAt": "created_at",
        "currentStock": "current_stock",
        "sellingPrice": "selling_price",
        "name": "name",
    }
    ordering = ["-created_at", "-id"]

    def get_queryset(self):
        qs = super().get_queryset()
        branch = branch_scope(self.actor, self.request.query_params.get("branch"))
        if branch:
            qs = qs.filter(branch=branch)
        return qs

    def retrieve(self, request, pk=None):
        produce = Produce.objects.select_related("manager").filter(pk=pk).first()
        if produce is None:
            raise exceptions.NotFound("Produce not found")
        ensure_allowed(self.actor, "produce.read", produce)
        return Response(ProduceSerializer(produce).data)

    def create(self, request):
        produce = services.create_produce(self.actor, _input(ProduceInSerializer, request))
        return Response(ProduceSerializer(produce).data, status=status.HTTP_201_CREATED)

    def destroy(self, request, pk=None):
        services.delete_produce(self.actor, pk)
        return Response({"message": "Produce removed"})

    @action(detail=True, methods=["PUT"], url_path="stock")
    def stock(self, request, pk=None):
        produce = services.restock_produce(self.actor, pk, _input(RestockSerializer, request))
        return Response(ProduceSerializer(produce).data)

    @action(detail=True, methods=["PUT"], url_path="price")
    def price(self, request, pk=None):
        produce = services.reprice_produce(self.actor, pk, _input(PriceSerializer, request))
        return Response(ProduceSerializer(produce).data)

    @action(detail=False, methods=["GET"], url_path="alerts/low-stock", url_name="low-stock")
    def low_stock(self, request):
        return Response(ProduceSerializer(services.low_stock_alerts(self.actor), many=True).data)


# ============================================================
# SaleViewSet
# ============================================================
class SaleViewSet(ActorMixin, mixins.ListModelMixin, viewsets.GenericViewSet):
    """
    /api/sales
      - startDate=2024-05-01&endDate=2024-05-31
      - agent=<user id>
    """
    permission_classes = [IsAuthenticated, PolicyPermission]
    policy_actions = {
        "list": "sale.read",
        "recent": "sale.read",
        "create": "sale.create",
        "summary": "sale.summary",
    }

    queryset = Sale.objects.select_related("produce", "sales_agent").order_by("-created_at", "-id")
    serializer_class = SaleSerializer

    def get_queryset(self):
        qs = super().get_queryset()
        branch = branch_scope(self.actor)
        if branch:
            qs = qs.filter(branch=branch)
        return qs

    def filter_queryset(self, queryset):
        params = self.request.query_params
        start, end = _date_range(params)
        queryset = reports.filter_sales(queryset, start=start, end=end)
        agent = params.get("agent")
        if agent:
            if not agent.isdigit():
                raise exceptions.ValidationError({"agent": ["Enter a valid user id."]})
            queryset = queryset.filter(sales_agent_id=int(agent))
        return queryset

    def create(self, request):
        sale = services.originate_sale(self.actor, _input(SaleInSerializer, request))
        return Response(SaleSerializer(sale).data, status=status.HTTP_201_CREATED)

    @action(detail=False, methods=["GET"])
    def summary(self, request):
        return Response(reports.sales_summary())

    @action(detail=False, methods=["GET"])
    def recent(self, request):
        qs = self.get_queryset()[: settings.RECENT_SALES_LIMIT]
        return Response(SaleSerializer(qs, many=True).data)


# ============================================================
# CreditViewSet
# ============================================================
class CreditViewSet(ActorMixin, mixins.ListModelMixin, viewsets.GenericViewSet):
    """
    /api/credit
      - status=Pending|Partial|Paid
      - startDate=...&endDate=...     # by creation date
    """
    permission_classes = [IsAuthenticated, PolicyPermission]
    policy_actions = {
        "list": "credit.read",
        "overdue": "credit.read",
        "create": "credit.create",
        "payment": "credit.pay",
    }

    queryset = Credit.objects.select_related("produce", "sales_agent").order_by("due_date", "id")
    serializer_class = CreditSerializer
    lookup_value_regex = r"\d+"

    def get_queryset(self):
        qs = super().get_queryset()
        branch = branch_scope(self.actor)
        if branch:
            qs = qs.filter(branch=branch)
        return qs

    def filter_queryset(self, queryset):
        params = self.request.query_params
        status_ = params.get("status")
        if status_:
            if status_ not in dict(Credit.STATUS_CHOICES):
                raise exceptions.ValidationError({"status": [f"Unknown status {status_}."]})
            queryset = queryset.filter(status=status_)
        start, end = _date_range(params)
        if start and end:
            queryset = queryset.filter(created_at__date__gte=start, created_at__date__lte=end)
        return queryset

    def create(self, request):
        credit = services.originate_credit(self.actor, _input(CreditInSerializer, request))
        return Response(CreditSerializer(credit).data, status=status.HTTP_201_CREATED)

    @action(detail=False, methods=["GET"])
    def overdue(self, request):
        qs = self.get_queryset().filter(due_date__lt=timezone.localdate()).exclude(status=Credit.PAID)
        return Response(CreditSerializer(qs, many=True).data)

    @action(detail=True, methods=["PUT"])
    def payment(self, request, pk=None):
        credit = services.record_credit_payment(self.actor, pk, _input(PaymentSerializer, request))
        return Response(CreditSerializer(credit).data)


# ============================================================
# Reports
# ============================================================
@api_view(["GET"])
@permission_classes([IsAuthenticated, policy_permission("report.dashboard")])
def dashboard_report(request):
    return Response(reports.dashboard())


@api_view(["GET"])
@permission_classes([IsAuthenticated, policy_permission("report.branch")])
def branch_report(request):
    return Response(reports.branch_report(request.user.branch))


@api_view(["GET"])
@permission_classes([IsAuthenticated, policy_permission("report.sales")])
def sales_report(request):
    actor = Actor.from_user(request.user)
    start, end = _date_range(request.query_params)
    branch = branch_scope(actor, request.query_params.get("branch"))
    qs, summary = reports.sales_report(branch=branch, start=start, end=end)
    return Response({"sales": SaleSerializer(qs, many=True).data, "summary": summary})
