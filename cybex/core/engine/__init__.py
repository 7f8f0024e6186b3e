"""Engine — reporter interface and the run driver (executor.py)."""
