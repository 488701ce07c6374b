"""Submission pipeline: sinks, duplicate guard and fan-out."""
