"""Settings and options-file loading."""
