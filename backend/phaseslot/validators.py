"""Request validators for the session API."""
from phaseslot.config import settings
from phaseslot.errors import ErrorCode, GameError
from phaseslot.protocol import SpinRequest


def validate_bet(request: SpinRequest) -> None:
    """
    Validate bet amount against the bet menu.

    Raises INVALID_BET if betAmount not in allowedBets.
    """
    if request.betAmount not in settings.allowed_bets:
        raise GameError(
            ErrorCode.INVALID_BET,
            f"Bet amount {request.betAmount} not allowed. "
            f"Allowed: {settings.allowed_bets}",
        )


def validate_request_id(request: SpinRequest) -> None:
    """Raises INVALID_REQUEST on a blank clientRequestId."""
    if not request.clientRequestId.strip():
        raise GameError(
            ErrorCode.INVALID_REQUEST,
            "clientRequestId must not be empty.",
        )


def validate_spin_request(request: SpinRequest) -> None:
    """Run all validations on spin request."""
    validate_request_id(request)
    validate_bet(request)
