"""Runtime services shared across the studio (telemetry)."""
