"""Core watchdog logic: classification, transition tracking, the poll loop."""
