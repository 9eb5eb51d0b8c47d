"""Game domain services: dice and round scoring.

This package contains pure domain logic that is imported by the game
model, keeping transport concerns separated from core game mechanics.
"""
