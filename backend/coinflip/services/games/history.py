from sqlalchemy import or_

from coinflip import db
from coinflip.models import MatchResult


class MatchHistory:
    """Append-only log of finished matches backed by Flask-SQLAlchemy.

    The coordinator calls ``record`` from request handlers and from the
    sweep worker, so every write opens its own app context.
    """

    def __init__(self, app):
        self.app = app

    def record(self, game_id, winner_id, loser_id, reason, winner_coins, loser_coins, finished_at) -> None:
        with self.app.app_context():
            result = MatchResult(
                game_id=game_id,
                winner_id=winner_id,
                loser_id=loser_id,
                reason=reason,
                winner_coins=winner_coins,
                loser_coins=loser_coins,
                finished_at=finished_at,
            )
            try:
                db.session.add(result)
                db.session.commit()
            except Exception:
                db.session.rollback()
                raise
            self.app.logger.info(f"[history] game={game_id} winner={winner_id} reason={reason}")


def recent_results(player_id=None, limit=50):
    query = MatchResult.query
    if player_id:
        query = query.filter(or_(MatchResult.winner_id == player_id, MatchResult.loser_id == player_id))
    return query.order_by(MatchResult.finished_at.desc(), MatchResult.id.desc()).limit(limit).all()
