"""Brainder: swipeable AI-generated science facts."""
