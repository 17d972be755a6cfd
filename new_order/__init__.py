"""Counters for the Knights of New Order game."""
