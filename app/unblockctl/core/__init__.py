"""Core engine: allowlist, configuration, errors and the session orchestrator."""
