# trading/serializers.py

from rest_framework import serializers

from .models import Credit, Produce, Sale, User


# ============ Users ============
class UserSerializer(serializers.ModelSerializer):
    class Meta:
        model = User
        fields = ["id", "name", "email", "role", "branch", "contact"]
        read_only_fields = fields


class UserBriefSerializer(serializers.ModelSerializer):
    class Meta:
        model = User
        fields = ["id", "name", "email"]


class AgentBriefSerializer(serializers.ModelSerializer):
    class Meta:
        model = User
        fields = ["id", "name", "role"]


# constraint checks live in validators.py; these only coerce wire types
class RegisterSerializer(serializers.Serializer):
    name     = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    email    = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    password = serializers.CharField(required=False, allow_blank=True, allow_null=True, trim_whitespace=False)
    role     = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    branch   = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    contact  = serializers.CharField(required=False, allow_blank=True, allow_null=True)


class LoginSerializer(serializers.Serializer):
    email    = serializers.CharField()
    password = serializers.CharField(trim_whitespace=False)


# ============ Produce ============
class ProduceSerializer(serializers.ModelSerializer):
    currentStock  = serializers.IntegerField(source="current_stock", read_only=True)
    sellingPrice  = serializers.IntegerField(source="selling_price", read_only=True)
    dealerContact = serializers.CharField(source="dealer_contact", read_only=True)
    manager       = UserBriefSerializer(read_only=True, allow_null=True)
    createdAt     = serializers.DateTimeField(source="created_at", read_only=True)
    updatedAt     = serializers.DateTimeField(source="updated_at", read_only=True)

    class Meta:
        model = Produce
        fields = [
            "id", "name", "type", "branch",
            "tonnage", "currentStock", "cost", "sellingPrice",
            "dealer", "dealerContact", "source", "manager",
            "createdAt", "updatedAt",
        ]
        read_only_fields = fields


class ProduceBriefSerializer(serializers.ModelSerializer):
    sellingPrice = serializers.IntegerField(source="selling_price", read_only=True)

    class Meta:
        model = Produce
        fields = ["id", "name", "type", "sellingPrice"]


class ProduceInSerializer(serializers.Serializer):
    name          = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    type          = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    tonnage       = serializers.IntegerField(required=False, allow_null=True)
    cost          = serializers.IntegerField(required=False, allow_null=True)
    sellingPrice  = serializers.IntegerField(source="selling_price", required=False, allow_null=True)
    dealer        = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    dealerContact = serializers.CharField(source="dealer_contact", required=False, allow_blank=True, allow_null=True)
    branch        = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    source        = serializers.CharField(required=False, allow_blank=True, allow_null=True)


class RestockSerializer(serializers.Serializer):
    additionalStock = serializers.IntegerField(source="additional_stock", required=False, allow_null=True)


class PriceSerializer(serializers.Serializer):
    sellingPrice = serializers.IntegerField(source="selling_price", required=False, allow_null=True)


# ============ Sales ============
class SaleSerializer(serializers.ModelSerializer):
    produce    = ProduceBriefSerializer(read_only=True, allow_null=True)
    amountPaid = serializers.IntegerField(source="amount_paid", read_only=True)
    buyerName  = serializers.CharField(source="buyer_name", read_only=True)
    salesAgent = AgentBriefSerializer(source="sales_agent", read_only=True, allow_null=True)
    createdAt  = serializers.DateTimeField(source="created_at", read_only=True)
    updatedAt  = serializers.DateTimeField(source="updated_at", read_only=True)

    class Meta:
        model = Sale
        fields = [
            "id", "produce", "tonnage", "amountPaid", "buyerName",
            "salesAgent", "branch", "createdAt", "updatedAt",
        ]
        read_only_fields = fields


class SaleInSerializer(serializers.Serializer):
    produceId  = serializers.IntegerField(source="produce_id", required=False, allow_null=True)
    tonnage    = serializers.IntegerField(required=False, allow_null=True)
    amountPaid = serializers.IntegerField(source="amount_paid", required=False, allow_null=True)
    buyerName  = serializers.CharField(source="buyer_name", required=False, allow_blank=True, allow_null=True)


# ============ Credit sales ============
class CreditSerializer(serializers.ModelSerializer):
    produce    = ProduceBriefSerializer(read_only=True, allow_null=True)
    amountDue  = serializers.IntegerField(source="amount_due", read_only=True)
    amountPaid = serializers.IntegerField(source="amount_paid", read_only=True)
    buyerName  = serializers.CharField(source="buyer_name", read_only=True)
    nationalId = serializers.CharField(source="national_id", read_only=True)
    dueDate    = serializers.DateField(source="due_date", read_only=True)
    salesAgent = AgentBriefSerializer(source="sales_agent", read_only=True, allow_null=True)
    createdAt  = serializers.DateTimeField(source="created_at", read_only=True)
    updatedAt  = serializers.DateTimeField(source="updated_at", read_only=True)

    class Meta:
        model = Credit
        fields = [
            "id", "produce", "tonnage", "amountDue", "amountPaid", "balance", "status",
            "buyerName", "nationalId", "location", "contact", "dueDate",
            "salesAgent", "branch", "createdAt", "updatedAt",
        ]
        read_only_fields = fields


class CreditInSerializer(serializers.Serializer):
    produceId  = serializers.IntegerField(source="produce_id", required=False, allow_null=True)
    tonnage    = serializers.IntegerField(required=False, allow_null=True)
    amountDue  = serializers.IntegerField(source="amount_due", required=False, allow_null=True)
    buyerName  = serializers.CharField(source="buyer_name", required=False, allow_blank=True, allow_null=True)
    nationalId = serializers.CharField(source="national_id", required=False, allow_blank=True, allow_null=True)
    location   = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    contact    = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    dueDate    = serializers.DateField(source="due_date", required=False, allow_null=True,
                                       input_formats=["iso-8601", "%Y-%m-%dT%H:%M:%S.%fZ"])


class PaymentSerializer(serializers.Serializer):
    amountPaid = serializers.IntegerField(source="amount_paid", required=False, allow_null=True)
