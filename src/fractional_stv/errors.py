"""
Contains the exception raised for rejected election input.
"""


class InvalidInput(ValueError):
    """Raised when a computation is asked for with input that breaks a precondition:
    a non-positive seat count, no ballots, a non-positive ballot weight, or an empty or
    duplicate-containing preference order.

    Always raised before any event is emitted, so no partial event log exists.
    """
