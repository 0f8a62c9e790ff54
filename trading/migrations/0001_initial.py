import django.db.models.deletion
import django.utils.timezone
import trading.models
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("auth", "0012_alter_user_first_name_max_length"),
    ]

    operations = [
        migrations.CreateModel(
            name="User",
            fields=[
                ("password", models.CharField(max_length=128, verbose_name="password")),
                ("last_login", models.DateTimeField(blank=True, null=True, verbose_name="last login")),
                ("is_superuser", models.BooleanField(
                    default=False,
                    help_text="Designates that this user has all permissions without explicitly assigning them.",
                    verbose_name="superuser status",
                )),
                ("id", models.BigAutoField(primary_key=True, serialize=False)),
                ("name", models.CharField(max_length=120)),
                ("email", models.EmailField(max_length=254, unique=True)),
                ("role", models.CharField(
                    choices=[("manager", "Manager"), ("sales_agent", "Sales agent"), ("director", "Director")],
                    default="sales_agent", max_length=20,
                )),
                ("branch", models.CharField(choices=[("Maganjo", "Maganjo"), ("Matugga", "Matugga")], max_length=30)),
                ("contact", models.CharField(blank=True, default="", max_length=20)),
                ("is_active", models.BooleanField(default=True)),
                ("is_staff", models.BooleanField(default=False)),
                ("date_joined", models.DateTimeField(default=django.utils.timezone.now)),
                ("groups", models.ManyToManyField(
                    blank=True,
                    help_text="The groups this user belongs to. A user will get all permissions granted to each of their groups.",
                    related_name="user_set", related_query_name="user", to="auth.group", verbose_name="groups",
                )),
                ("user_permissions", models.ManyToManyField(
                    blank=True, help_text="Specific permissions for this user.",
                    related_name="user_set", related_query_name="user", to="auth.permission",
                    verbose_name="user permissions",
                )),
            ],
            options={
                "db_table": "users",
                "indexes": [
                    models.Index(fields=["role"], name="idx_users_role"),
                    models.Index(fields=["branch"], name="idx_users_branch"),
                ],
            },
            managers=[
                ("objects", trading.models.UserManager()),
            ],
        ),
        migrations.CreateModel(
            name="Produce",
            fields=[
                ("id", models.BigAutoField(primary_key=True, serialize=False)),
                ("name", models.CharField(max_length=120)),
                ("type", models.CharField(max_length=60)),
                ("branch", models.CharField(choices=[("Maganjo", "Maganjo"), ("Matugga", "Matugga")], max_length=30)),
                ("tonnage", models.PositiveIntegerField()),
                ("current_stock", models.PositiveIntegerField()),
                ("cost", models.PositiveBigIntegerField()),
                ("selling_price", models.PositiveBigIntegerField()),
                ("dealer", models.CharField(max_length=120)),
                ("dealer_contact", models.CharField(max_length=20)),
                ("source", models.CharField(
                    choices=[("Individual", "Individual"), ("Company", "Company"), ("Own Farm", "Own Farm")],
                    default="Individual", max_length=20,
                )),
                ("created_at", models.DateTimeField(editable=False)),
                ("updated_at", models.DateTimeField(editable=False)),
                ("manager", models.ForeignKey(
                    db_column="manager", db_constraint=False, null=True,
                    on_delete=django.db.models.deletion.DO_NOTHING,
                    related_name="produce_managed", to="trading.user",
                )),
            ],
            options={
                "db_table": "produce",
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(fields=["branch"], name="idx_produce_branch"),
                    models.Index(fields=["name"], name="idx_produce_name"),
                    models.Index(fields=["created_at"], name="idx_produce_created"),
                ],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(current_stock__gte=0), name="ck_produce_stock_nonnegative",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(current_stock__lte=models.F("tonnage")), name="ck_produce_stock_le_tonnage",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="Sale",
            fields=[
                ("id", models.BigAutoField(primary_key=True, serialize=False)),
                ("tonnage", models.PositiveIntegerField()),
                ("amount_paid", models.PositiveBigIntegerField()),
                ("buyer_name", models.CharField(max_length=120)),
                ("branch", models.CharField(choices=[("Maganjo", "Maganjo"), ("Matugga", "Matugga")], max_length=30)),
                ("created_at", models.DateTimeField(editable=False)),
                ("updated_at", models.DateTimeField(editable=False)),
                ("produce", models.ForeignKey(
                    db_column="produce", db_constraint=False, null=True,
                    on_delete=django.db.models.deletion.DO_NOTHING,
                    related_name="sales", to="trading.produce",
                )),
                ("sales_agent", models.ForeignKey(
                    db_column="sales_agent", db_constraint=False, null=True,
                    on_delete=django.db.models.deletion.DO_NOTHING,
                    related_name="sales", to="trading.user",
                )),
            ],
            options={
                "db_table": "sales",
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(fields=["branch"], name="idx_sales_branch"),
                    models.Index(fields=["produce"], name="idx_sales_produce"),
                    models.Index(fields=["sales_agent"], name="idx_sales_agent"),
                    models.Index(fields=["created_at"], name="idx_sales_created"),
                ],
            },
        ),
        migrations.CreateModel(
            name="Credit",
            fields=[
                ("id", models.BigAutoField(primary_key=True, serialize=False)),
                ("tonnage", models.PositiveIntegerField()),
                ("amount_due", models.PositiveBigIntegerField()),
                ("amount_paid", models.PositiveBigIntegerField(default=0)),
                ("buyer_name", models.CharField(max_length=120)),
                ("national_id", models.CharField(max_length=14)),
                ("location", models.CharField(max_length=120)),
                ("contact", models.CharField(max_length=20)),
                ("due_date", models.DateField()),
                ("branch", models.CharField(choices=[("Maganjo", "Maganjo"), ("Matugga", "Matugga")], max_length=30)),
                ("status", models.CharField(
                    choices=[("Pending", "Pending"), ("Partial", "Partial"), ("Paid", "Paid")],
                    default="Pending", max_length=10,
                )),
                ("created_at", models.DateTimeField(editable=False)),
                ("updated_at", models.DateTimeField(editable=False)),
                ("produce", models.ForeignKey(
                    db_column="produce", db_constraint=False, null=True,
                    on_delete=django.db.models.deletion.DO_NOTHING,
                    related_name="credits", to="trading.produce",
                )),
                ("sales_agent", models.ForeignKey(
                    db_column="sales_agent", db_constraint=False, null=True,
                    on_delete=django.db.models.deletion.DO_NOTHING,
                    related_name="credits", to="trading.user",
                )),
            ],
            options={
                "db_table": "credits",
                "ordering": ["due_date"],
                "indexes": [
                    models.Index(fields=["branch", "status"], name="idx_credits_branch_status"),
                    models.Index(fields=["due_date"], name="idx_credits_due"),
                    models.Index(fields=["created_at"], name="idx_credits_created"),
                ],
            },
        ),
    ]
