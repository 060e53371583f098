"""Typed failures raised by the game core.

Hierarchy:
- GameError
  - NotFound
  - InvalidAction
    - InvalidBet
    - InvalidFlip
  - InsufficientCoins
  - CooldownActive
  - AlreadyWaiting
  - NotificationFailed
"""


class GameError(Exception):
    """Base for every failure the core reports to a caller."""
    code = 'game_error'
    message = 'Game error'
    status_code = 400
    retryable = False

    def __init__(self, message=None):
        super().__init__(message or self.message)
        self.message = message or self.message

    def to_dict(self):
        return {'error': self.message, 'code': self.code}


class NotFound(GameError):
    code = 'not_found'
    message = 'Not found'
    status_code = 404


class InvalidAction(GameError):
    code = 'invalid_action'
    message = 'Invalid action'


class InvalidBet(InvalidAction):
    code = 'invalid_bet'
    message = 'Invalid bet'


class InvalidFlip(InvalidAction):
    code = 'invalid_flip'
    message = 'Invalid flip'


class InsufficientCoins(GameError):
    code = 'insufficient_coins'
    message = 'Insufficient coins'


class CooldownActive(GameError):
    code = 'cooldown_active'
    message = 'Cooldown active'
    status_code = 429
    retryable = True

    def __init__(self, remaining_ms: int):
        super().__init__()
        self.remaining_ms = max(0, int(remaining_ms))

    def to_dict(self):
        payload = super().to_dict()
        payload['remainingTime'] = self.remaining_ms
        return payload


class AlreadyWaiting(GameError):
    code = 'already_waiting'
    message = 'Already waiting for match'
    status_code = 409


class NotificationFailed(GameError):
    # only raised when a session could not be announced and was rolled back
    code = 'notification_failed'
    message = 'Could not notify players, match cancelled'
    status_code = 503
    retryable = True
