"""Best-effort delivery of booking and payment notifications."""
