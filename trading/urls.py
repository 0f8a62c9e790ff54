# trading/urls.py
from django.urls import path, include
from rest_framework.routers import DefaultRouter
from .views import ProduceViewSet, SaleViewSet, CreditViewSet, register, login, profile, users, \
    dashboard_report, branch_report, sales_report

router = DefaultRouter(trailing_slash=False)
router.register(r"produce", ProduceViewSet, basename="produce")   # /api/produce
router.register(r"sales", SaleViewSet, basename="sale")           # /api/sales
router.register(r"credit", CreditViewSet, basename="credit")      # /api/credit

urlpatterns = [
    path("auth/register", register, name="auth-register"),
    path("auth/login", login, name="auth-login"),
    path("auth/profile", profile, name="auth-profile"),
    path("auth/users", users, name="auth-users"),

    path("reports/dashboard", dashboard_report, name="report-dashboard"),
    path("reports/branch", branch_report, name="report-branch"),
    path("reports/sales", sales_report, name="report-sales"),

    path("", include(router.urls)),
]
