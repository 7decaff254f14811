"""Utility helpers for covreport."""
