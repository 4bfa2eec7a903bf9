"""Authentication and refresh-session orchestration."""
