"""Runtime settings and run-config loading."""
