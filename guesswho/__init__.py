"""Guess Who Said It: party game core for a Discord voice-channel Activity."""
