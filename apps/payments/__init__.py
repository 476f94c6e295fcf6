"""Payment records and gateway callback reconciliation."""
