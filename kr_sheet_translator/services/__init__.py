"""Value resolution, JSON merge building and run orchestration."""
