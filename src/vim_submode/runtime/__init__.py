"""Runtime services: telemetry and deferred scheduling."""
