from django.conf import settings
from django.contrib import admin

from .models import Credit, Produce, Sale, User


@admin.register(User)
class UserAdmin(admin.ModelAdmin):
    list_display = ("id", "email", "name", "role", "branch", "is_active")
    list_filter = ("role", "branch", "is_active")
    search_fields = ("email", "name")
    fields = ("email", "name", "role", "branch", "contact", "is_active", "is_staff", "is_superuser", "date_joined")
    readonly_fields = ("date_joined",)


@admin.register(Produce)
class ProduceAdmin(admin.ModelAdmin):
    list_display = ("id", "name", "type", "branch", "current_stock", "tonnage", "selling_price", "low")
    list_filter = ("branch", "source")
    search_fields = ("name", "type", "dealer")
    # stock only moves through sales and restocking
    readonly_fields = ("current_stock",)

    def get_readonly_fields(self, request, obj=None):
        if obj is not None:
            return self.readonly_fields + ("tonnage",)
        return self.readonly_fields

    def low(self, obj):
        return obj.current_stock < obj.tonnage * settings.LOW_STOCK_RATIO
    low.boolean = True


@admin.register(Sale)
class SaleAdmin(admin.ModelAdmin):
    list_display = ("id", "produce", "tonnage", "amount_paid", "buyer_name", "branch", "created_at")
    list_filter = ("branch",)
    search_fields = ("buyer_name",)

    def has_change_permission(self, request, obj=None):
        return False


@admin.register(Credit)
class CreditAdmin(admin.ModelAdmin):
    list_display = ("id", "buyer_name", "amount_due", "amount_paid", "status", "due_date", "branch")
    list_filter = ("branch", "status")
    search_fields = ("buyer_name", "national_id")
    readonly_fields = ("status", "amount_paid")
