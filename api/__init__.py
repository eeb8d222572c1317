"""Flask HTTP layer for the expense ledger."""
