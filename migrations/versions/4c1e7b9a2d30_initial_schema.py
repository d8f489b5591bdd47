"""Create users, profiles, calculator records and verification codes."""

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = "4c1e7b9a2d30"
down_revision = None
branch_labels = None
depends_on = None


ROLES = ("USER", "ADMIN")
GENDERS = ("male", "female")
CALCULATOR_KINDS = (
    "bmi",
    "bmr",
    "body-fat",
    "waist-hip",
    "blood-pressure",
    "target-heart-rate",
    "sli",
    "calorie",
)
CODE_PURPOSES = ("register", "reset-password", "verify-email")


def upgrade() -> None:
    """Create the initial schema."""

    bind = op.get_bind()
    user_role = sa.Enum(*ROLES, name="user_role")
    profile_gender = sa.Enum(*GENDERS, name="profile_gender")
    calculator_kind = sa.Enum(*CALCULATOR_KINDS, name="calculator_kind")
    verification_purpose = sa.Enum(*CODE_PURPOSES, name="verification_purpose")
    for enum in (user_role, profile_gender, calculator_kind, verification_purpose):
        enum.create(bind, checkfirst=True)

    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("email", sa.String(length=255), nullable=False, unique=True),
        sa.Column("username", sa.String(length=32), nullable=False, unique=True),
        sa.Column("password_hash", sa.String(length=255), nullable=False),
        sa.Column("role", user_role, nullable=False, server_default=sa.text("'USER'")),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("email_verified", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("avatar", sa.String(length=512), nullable=True),
        sa.Column("last_login_at", sa.DateTime(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
    )

    op.create_table(
        "profiles",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "user_id",
            sa.Integer(),
            sa.ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
            unique=True,
        ),
        sa.Column("gender", profile_gender, nullable=True),
        sa.Column("birth_date", sa.Date(), nullable=True),
        sa.Column("height", sa.Float(), nullable=True),
        sa.Column("weight", sa.Float(), nullable=True),
        sa.Column("updated_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
    )

    op.create_table(
        "calculator_records",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "user_id",
            sa.Integer(),
            sa.ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("kind", calculator_kind, nullable=False),
        sa.Column("inputs", sa.JSON(), nullable=False),
        sa.Column("result", sa.JSON(), nullable=False),
        sa.Column("advice", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
    )
    op.create_index(
        op.f("ix_calculator_records_user_id"), "calculator_records", ["user_id"]
    )
    op.create_index(op.f("ix_calculator_records_kind"), "calculator_records", ["kind"])

    op.create_table(
        "verification_codes",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("purpose", verification_purpose, nullable=False),
        sa.Column("code_hash", sa.String(length=255), nullable=False),
        sa.Column("attempts", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("expires_at", sa.DateTime(), nullable=False),
        sa.Column("consumed_at", sa.DateTime(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
    )
    op.create_index(
        op.f("ix_verification_codes_email"), "verification_codes", ["email"]
    )


def downgrade() -> None:
    """Drop the initial schema."""

    op.drop_index(op.f("ix_verification_codes_email"), table_name="verification_codes")
    op.drop_table("verification_codes")
    op.drop_index(op.f("ix_calculator_records_kind"), table_name="calculator_records")
    op.drop_index(op.f("ix_calculator_records_user_id"), table_name="calculator_records")
    op.drop_table("calculator_records")
    op.drop_table("profiles")
    op.drop_table("users")

    bind = op.get_bind()
    for name in ("verification_purpose", "calculator_kind", "profile_gender", "user_role"):
        sa.Enum(name=name).drop(bind, checkfirst=True)
