"""Adaptive multiple-choice practice generated from your own study notes."""
