"""Create credential_accounts table holding one JSONB account document per API key."""

from __future__ import annotations

from alembic import op

# revision identifiers, used by Alembic.
revision = "20260301_0001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    """
    Create account document storage.

    Args:
        None.
    Returns:
        None.
    Assumptions:
        Account provisioning inserts rows; this service only updates documents.
    Raises:
        Exception: Postgres execution errors from Alembic runtime.
    Side Effects:
        Creates `credential_accounts`.
    """
    op.execute(
        """
        CREATE TABLE IF NOT EXISTS credential_accounts (
            api_key TEXT PRIMARY KEY,
            document JSONB NOT NULL DEFAULT '{}'::jsonb,
            updated_at TIMESTAMPTZ NOT NULL DEFAULT now(),
            CONSTRAINT credential_accounts_api_key_chk
                CHECK (length(btrim(api_key)) > 0),
            CONSTRAINT credential_accounts_document_shape_chk
                CHECK (jsonb_typeof(document) = 'object')
        )
        """
    )


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS credential_accounts")
