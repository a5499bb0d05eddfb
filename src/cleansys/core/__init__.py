"""Run orchestration core."""
