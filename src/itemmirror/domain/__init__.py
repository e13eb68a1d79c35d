"""Domain layer: fragment model, ports and reconciliation."""
