"""Business services, one package per domain area."""
