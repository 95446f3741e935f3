"""Task state machine and resource orchestration."""
