"""Errors raised at the boundary of the color-testing core."""


class InvalidInput(ValueError):
    """Malformed color identifier, unknown enum value, or out-of-range argument."""


class InvalidTrial(InvalidInput):
    """A trial whose colors cannot form a valid discrimination pair."""
