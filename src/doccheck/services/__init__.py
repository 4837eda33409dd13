"""Run coordination."""
