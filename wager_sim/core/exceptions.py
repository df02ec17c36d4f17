"""Recoverable game errors. Raised inside engines, reported by the coordinator."""


class GameError(Exception):
    """Base class for every rejected intent."""

    kind = "GameError"
    default_message = "Action rejected"
    severity = "error"

    def __init__(self, message: str = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class InvalidBet(GameError):
    kind = "InvalidBet"
    default_message = "Minimum bet is $10"


class InsufficientFunds(GameError):
    kind = "InsufficientFunds"
    default_message = "Insufficient balance"


class NoSelection(GameError):
    kind = "NoSelection"
    default_message = "Please select at least one bet"


class InvalidAction(GameError):
    kind = "InvalidAction"
    default_message = "That action is not available right now"


class NotActive(GameError):
    kind = "NotActive"
    default_message = "No round is running"
    severity = "info"


class RoundInProgress(GameError):
    kind = "RoundInProgress"
    default_message = "Finish the current round first"


class UnknownGame(GameError):
    kind = "UnknownGame"
    default_message = "Unknown game"
