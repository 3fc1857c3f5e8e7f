"""Create user, document and lifecycle tables

Revision ID: 3b7d1e9a0c42
Revises:
Create Date: 2026-09-14

"""

from alembic import op
import sqlalchemy as sa

revision = "3b7d1e9a0c42"
down_revision = None
branch_labels = None
depends_on = None

# SQLite only autoincrements INTEGER PRIMARY KEY; AUTOINCREMENT keeps
# deleted ids from being reused
id_type = sa.BigInteger().with_variant(sa.Integer(), "sqlite")


def upgrade():
    op.create_table(
        "user",
        sa.Column("id", id_type, primary_key=True, autoincrement=True),
        sa.Column("email", sa.String(255), nullable=False, unique=True),
        sa.Column("username", sa.String(64), nullable=False, unique=True),
        sa.Column("first_name", sa.Text(), nullable=True),
        sa.Column("last_name", sa.Text(), nullable=True),
        sa.Column("password_hash", sa.Text(), nullable=True),
        sa.Column("is_admin", sa.Boolean(), nullable=False, default=False),
        sa.Column("is_banned", sa.Boolean(), nullable=False, default=False),
        sa.Column("email_verified", sa.Boolean(), nullable=False, default=False),
        sa.Column("provider", sa.String(50), nullable=True),
        sa.Column("provider_id", sa.String(255), nullable=True),
        sa.Column("profile_image", sa.Text(), nullable=True),
        sa.Column("banner_image", sa.Text(), nullable=True),
        sa.Column("created_at", sa.BigInteger(), nullable=False),
        sa.Column("updated_at", sa.BigInteger(), nullable=False),
        sqlite_autoincrement=True,
    )

    op.create_table(
        "document",
        sa.Column("id", id_type, primary_key=True, autoincrement=True),
        sa.Column("user_id", id_type, sa.ForeignKey("user.id"), nullable=False),
        sa.Column("title", sa.Text(), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("tags", sa.JSON(), nullable=False),
        sa.Column("is_favorite", sa.Boolean(), nullable=False, default=False),
        sa.Column("created_at", sa.BigInteger(), nullable=False),
        sa.Column("updated_at", sa.BigInteger(), nullable=False),
        sqlite_autoincrement=True,
    )
    op.create_index("document_user_id_idx", "document", ["user_id"])

    op.create_table(
        "folder",
        sa.Column("id", id_type, primary_key=True, autoincrement=True),
        sa.Column("user_id", id_type, sa.ForeignKey("user.id"), nullable=False),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("created_at", sa.BigInteger(), nullable=False),
        sa.Column("updated_at", sa.BigInteger(), nullable=False),
        sqlite_autoincrement=True,
    )
    op.create_index("ix_folder_user_id", "folder", ["user_id"])

    op.create_table(
        "folder_document",
        sa.Column("id", id_type, primary_key=True, autoincrement=True),
        sa.Column("folder_id", id_type, sa.ForeignKey("folder.id"), nullable=False),
        sa.Column(
            "document_id", id_type, sa.ForeignKey("document.id"), nullable=False
        ),
        sa.UniqueConstraint("folder_id", "document_id", name="uq_folder_document"),
        sqlite_autoincrement=True,
    )
    op.create_index("ix_folder_document_folder_id", "folder_document", ["folder_id"])
    op.create_index(
        "ix_folder_document_document_id", "folder_document", ["document_id"]
    )

    op.create_table(
        "share",
        sa.Column("id", id_type, primary_key=True, autoincrement=True),
        sa.Column(
            "document_id", id_type, sa.ForeignKey("document.id"), nullable=False
        ),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("permission", sa.String(20), nullable=False),
        sa.Column("created_at", sa.BigInteger(), nullable=False),
        sa.UniqueConstraint("document_id", "email", name="uq_share_document_email"),
        sqlite_autoincrement=True,
    )
    op.create_index("ix_share_document_id", "share", ["document_id"])
    op.create_index("ix_share_email", "share", ["email"])

    op.create_table(
        "deleted_account",
        sa.Column("id", id_type, primary_key=True, autoincrement=True),
        sa.Column("original_user_id", sa.BigInteger(), nullable=False),
        sa.Column("email", sa.String(255), nullable=False, unique=True),
        sa.Column("username", sa.String(64), nullable=True),
        sa.Column("first_name", sa.Text(), nullable=True),
        sa.Column("last_name", sa.Text(), nullable=True),
        sa.Column("provider", sa.String(50), nullable=True),
        sa.Column("provider_id", sa.String(255), nullable=True),
        sa.Column("profile_image", sa.Text(), nullable=True),
        sa.Column("banner_image", sa.Text(), nullable=True),
        sa.Column("is_admin", sa.Boolean(), nullable=False, default=False),
        sa.Column("is_banned", sa.Boolean(), nullable=False, default=False),
        sa.Column("reason", sa.Text(), nullable=True),
        sa.Column("snapshot", sa.JSON(), nullable=False),
        sa.Column("added_at", sa.BigInteger(), nullable=False),
        sa.Column("expires_at", sa.BigInteger(), nullable=False),
        sqlite_autoincrement=True,
    )
    op.create_index(
        "deleted_account_original_user_id_idx", "deleted_account", ["original_user_id"]
    )
    op.create_index("deleted_account_expires_at_idx", "deleted_account", ["expires_at"])

    op.create_table(
        "trash_document",
        sa.Column("id", id_type, primary_key=True, autoincrement=True),
        sa.Column("original_id", sa.BigInteger(), nullable=True),
        sa.Column("user_id", sa.BigInteger(), nullable=False),
        sa.Column("title", sa.Text(), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("tags", sa.JSON(), nullable=False),
        sa.Column("created_at", sa.BigInteger(), nullable=False),
        sa.Column("updated_at", sa.BigInteger(), nullable=False),
        sa.Column("deleted_at", sa.BigInteger(), nullable=False),
        sqlite_autoincrement=True,
    )
    op.create_index("trash_document_user_id_idx", "trash_document", ["user_id"])
    op.create_index("trash_document_deleted_at_idx", "trash_document", ["deleted_at"])


def downgrade():
    op.drop_index("trash_document_deleted_at_idx", table_name="trash_document")
    op.drop_index("trash_document_user_id_idx", table_name="trash_document")
    op.drop_table("trash_document")

    op.drop_index("deleted_account_expires_at_idx", table_name="deleted_account")
    op.drop_index("deleted_account_original_user_id_idx", table_name="deleted_account")
    op.drop_table("deleted_account")

    op.drop_index("ix_share_email", table_name="share")
    op.drop_index("ix_share_document_id", table_name="share")
    op.drop_table("share")

    op.drop_index("ix_folder_document_document_id", table_name="folder_document")
    op.drop_index("ix_folder_document_folder_id", table_name="folder_document")
    op.drop_table("folder_document")

    op.drop_index("ix_folder_user_id", table_name="folder")
    op.drop_table("folder")

    op.drop_index("document_user_id_idx", table_name="document")
    op.drop_table("document")

    op.drop_table("user")
