"""Equipment items and their check-out/check-in custody trail."""
