"""
Exception hierarchy for the poker engine and session layer.

Four families:
- ValidationError: malformed input (unknown action, missing raise amount)
- StateError: action illegal given turn / fold / all-in status or room state
- RuleViolation: betting rule broken (raise too small, not enough chips)
- ResourceExhaustion: deck underflow; a modelling bug, never recovered from

The engine raises these internally and turns the recoverable ones into a
rejected ActionResult. The message of each exception is the short text
relayed to the client.
"""


class PokerError(Exception):
    """Base class for all poker errors."""


class ValidationError(PokerError):
    """Malformed input."""


class StateError(PokerError):
    """Operation not allowed in the current state."""


class RuleViolation(PokerError):
    """Betting rule violated."""


class ResourceExhaustion(PokerError):
    """A finite resource ran out. Fatal for the current hand."""


# Validation

class InvalidActionError(ValidationError):
    def __init__(self, action: object):
        super().__init__(f"Invalid action: {action}")


class MissingRaiseAmountError(ValidationError):
    def __init__(self):
        super().__init__("Raise amount required")


class InvalidAmountError(ValidationError):
    def __init__(self, amount: object):
        super().__init__(f"Invalid amount: {amount}")


# State

class HandNotInProgressError(StateError):
    def __init__(self):
        super().__init__("No hand in progress")


class PlayerNotFoundError(StateError):
    def __init__(self, player_id: str = ""):
        super().__init__("Player not found")
        self.player_id = player_id


class NotYourTurnError(StateError):
    def __init__(self):
        super().__init__("Not your turn")


class PlayerCannotActError(StateError):
    def __init__(self):
        super().__init__("Cannot act")


class InvalidCheckError(StateError):
    def __init__(self, to_call: int):
        super().__init__(f"Cannot check, must call {to_call}")
        self.to_call = to_call


class RoomNotFoundError(StateError):
    def __init__(self, room_id: str = ""):
        super().__init__("Room not found")
        self.room_id = room_id


class RoomFullError(StateError):
    def __init__(self):
        super().__init__("Room is full")


class AlreadySeatedError(StateError):
    def __init__(self):
        super().__init__("Already in room")


class HandInProgressError(StateError):
    def __init__(self):
        super().__init__("Game already started")


class NotEnoughPlayersError(StateError):
    def __init__(self, minimum: int):
        super().__init__(f"Need at least {minimum} players")


# Rules

class RaiseTooSmallError(RuleViolation):
    def __init__(self, min_raise: int, message: str = ""):
        super().__init__(message or f"Minimum raise is {min_raise}")
        self.min_raise = min_raise


class InsufficientChipsError(RuleViolation):
    def __init__(self, message: str = "Not enough chips"):
        super().__init__(message)


# Resources

class DeckExhaustedError(ResourceExhaustion):
    def __init__(self, requested: int, remaining: int):
        super().__init__(
            f"Cannot deal {requested} cards, only {remaining} remain"
        )
        self.requested = requested
        self.remaining = remaining
