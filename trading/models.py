from django.contrib.auth.models import AbstractBaseUser, BaseUserManager, PermissionsMixin
from django.db import models
from django.db.models import F, Q
from django.utils import timezone

MAGANJO = "Maganjo"
MATUGGA = "Matugga"
BRANCH_CHOICES = [(MAGANJO, "Maganjo"), (MATUGGA, "Matugga")]
BRANCHES = [b for b, _ in BRANCH_CHOICES]

MANAGER = "manager"
SALES_AGENT = "sales_agent"
DIRECTOR = "director"
ROLE_CHOICES = [(MANAGER, "Manager"), (SALES_AGENT, "Sales agent"), (DIRECTOR, "Director")]
ROLES = [r for r, _ in ROLE_CHOICES]


class UserManager(BaseUserManager):
    use_in_migrations = True

    def create_user(self, email, password=None, **extra):
        if not email:
            raise ValueError("email is required")
        user = self.model(email=self.normalize_email(email).lower(), **extra)
        user.set_password(password)
        user.save(using=self._db)
        return user

    def create_superuser(self, email, password=None, **extra):
        extra.setdefault("role", DIRECTOR)
        extra.setdefault("branch", MAGANJO)
        extra.setdefault("is_staff", True)
        extra.setdefault("is_superuser", True)
        return self.create_user(email, password, **extra)


class User(AbstractBaseUser, PermissionsMixin):
    id = models.BigAutoField(primary_key=True)
    name = models.CharField(max_length=120)
    email = models.EmailField(unique=True)
    role = models.CharField(max_length=20, choices=ROLE_CHOICES, default=SALES_AGENT)
    branch = models.CharField(max_length=30, choices=BRANCH_CHOICES)
    contact = models.CharField(max_length=20, blank=True, default="")

    is_active = models.BooleanField(default=True)
    is_staff = models.BooleanField(default=False)
    date_joined = models.DateTimeField(default=timezone.now)

    objects = UserManager()

    USERNAME_FIELD = "email"
    EMAIL_FIELD = "email"
    REQUIRED_FIELDS = ["name"]

    class Meta:
        db_table = "users"
        indexes = [
            models.Index(fields=["role"], name="idx_users_role"),
            models.Index(fields=["branch"], name="idx_users_branch"),
        ]

    def __str__(self):
        return f"{self.name} <{self.email}>"

    @property
    def is_director(self) -> bool:
        return self.role == DIRECTOR


class Produce(models.Model):
    INDIVIDUAL = "Individual"
    COMPANY = "Company"
    OWN_FARM = "Own Farm"
    SOURCE_CHOICES = [(INDIVIDUAL, "Individual"), (COMPANY, "Company"), (OWN_FARM, "Own Farm")]

    id = models.BigAutoField(primary_key=True)
    name = models.CharField(max_length=120)
    type = models.CharField(max_length=60)
    branch = models.CharField(max_length=30, choices=BRANCH_CHOICES)

    tonnage = models.PositiveIntegerField()          # kg received in total
    current_stock = models.PositiveIntegerField()    # kg still sellable

    cost = models.PositiveBigIntegerField()
    selling_price = models.PositiveBigIntegerField()

    dealer = models.CharField(max_length=120)
    dealer_contact = models.CharField(max_length=20)
    source = models.CharField(max_length=20, choices=SOURCE_CHOICES, default=INDIVIDUAL)

    manager = models.ForeignKey(
        "User", db_column="manager", on_delete=models.DO_NOTHING,
        db_constraint=False, null=True, related_name="produce_managed",
    )

    created_at = models.DateTimeField(editable=False)
    updated_at = models.DateTimeField(editable=False)

    class Meta:
        db_table = "produce"
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["branch"], name="idx_produce_branch"),
            models.Index(fields=["name"], name="idx_produce_name"),
            models.Index(fields=["created_at"], name="idx_produce_created"),
        ]
        constraints = [
            models.CheckConstraint(condition=Q(current_stock__gte=0), name="ck_produce_stock_nonnegative"),
            models.CheckConstraint(condition=Q(current_stock__lte=F("tonnage")), name="ck_produce_stock_le_tonnage"),
        ]

    def __str__(self):
        return f"{self.name} ({self.branch}) {self.current_stock}/{self.tonnage}kg"

    def save(self, *args, **kwargs):
        now = timezone.now()
        self.updated_at = now
        if not self.created_at:
            self.created_at = now
        if self.current_stock is None:
            self.current_stock = self.tonnage
        return super().save(*args, **kwargs)


class Sale(models.Model):
    id = models.BigAutoField(primary_key=True)

    # linked by id only; sales survive deletion of their produce
    produce = models.ForeignKey(
        "Produce", db_column="produce", on_delete=models.DO_NOTHING,
        db_constraint=False, null=True, related_name="sales",
    )
    tonnage = models.PositiveIntegerField()
    amount_paid = models.PositiveBigIntegerField()
    buyer_name = models.CharField(max_length=120)

    sales_agent = models.ForeignKey(
        "User", db_column="sales_agent", on_delete=models.DO_NOTHING,
        db_constraint=False, null=True, related_name="sales",
    )
    branch = models.CharField(max_length=30, choices=BRANCH_CHOICES)  # copied from produce at creation

    created_at = models.DateTimeField(editable=False)
    updated_at = models.DateTimeField(editable=False)

    class Meta:
        db_table = "sales"
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["branch"], name="idx_sales_branch"),
            models.Index(fields=["produce"], name="idx_sales_produce"),
            models.Index(fields=["sales_agent"], name="idx_sales_agent"),
            models.Index(fields=["created_at"], name="idx_sales_created"),
        ]

    def __str__(self):
        return f"Sale {self.pk}: {self.tonnage}kg to {self.buyer_name}"

    def save(self, *args, **kwargs):
        now = timezone.now()
        self.updated_at = now
        if not self.created_at:
            self.created_at = now
        return super().save(*args, **kwargs)


class Credit(models.Model):
    PENDING = "Pending"
    PARTIAL = "Partial"
    PAID = "Paid"
    STATUS_CHOICES = [(PENDING, "Pending"), (PARTIAL, "Partial"), (PAID, "Paid")]

    id = models.BigAutoField(primary_key=True)

    produce = models.ForeignKey(
        "Produce", db_column="produce", on_delete=models.DO_NOTHING,
        db_constraint=False, null=True, related_name="credits",
    )
    tonnage = models.PositiveIntegerField()
    amount_due = models.PositiveBigIntegerField()
    amount_paid = models.PositiveBigIntegerField(default=0)

    buyer_name = models.CharField(max_length=120)
    national_id = models.CharField(max_length=14)
    location = models.CharField(max_length=120)
    contact = models.CharField(max_length=20)
    due_date = models.DateField()

    sales_agent = models.ForeignKey(
        "User", db_column="sales_agent", on_delete=models.DO_NOTHING,
        db_constraint=False, null=True, related_name="credits",
    )
    branch = models.CharField(max_length=30, choices=BRANCH_CHOICES)
    status = models.CharField(max_length=10, choices=STATUS_CHOICES, default=PENDING)

    created_at = models.DateTimeField(editable=False)
    updated_at = models.DateTimeField(editable=False)

    class Meta:
        db_table = "credits"
        ordering = ["due_date"]
        indexes = [
            models.Index(fields=["branch", "status"], name="idx_credits_branch_status"),
            models.Index(fields=["due_date"], name="idx_credits_due"),
            models.Index(fields=["created_at"], name="idx_credits_created"),
        ]

    def __str__(self):
        return f"Credit {self.pk}: {self.buyer_name} {self.amount_paid}/{self.amount_due} ({self.status})"

    @classmethod
    def derive_status(cls, amount_paid: int, amount_due: int) -> str:
        if amount_paid >= amount_due:
            return cls.PAID
        if amount_paid > 0:
            return cls.PARTIAL
        return cls.PENDING

    @property
    def balance(self) -> int:
        return max(self.amount_due - self.amount_paid, 0)

    def save(self, *args, **kwargs):
        now = timezone.now()
        self.updated_at = now
        if not self.created_at:
            self.created_at = now
        self.status = self.derive_status(self.amount_paid, self.amount_due)
        return super().save(*args, **kwargs)
