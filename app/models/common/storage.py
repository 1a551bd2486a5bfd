"""Key-value storage table - saved columns, filters, favorites."""

KV_DDL = """
CREATE TABLE IF NOT EXISTS kv_store (
    key VARCHAR PRIMARY KEY,
    value JSON NOT NULL,
    updated_at TIMESTAMP NOT NULL
)
"""
