"""Enums for model fields."""

from enum import Enum


class Difficulty(str, Enum):
    """How demanding a recipe is to cook."""

    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"
