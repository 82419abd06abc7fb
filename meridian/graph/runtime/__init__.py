"""Runtime orchestration components."""
