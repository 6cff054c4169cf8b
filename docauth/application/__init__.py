"""Application tasks (startup seeding)."""
