from coinflip import db


class MatchResult(db.Model):
    """One finished match. Append-only; live game state never lives here."""
    __tablename__ = 'match_result'
    id = db.Column(db.Integer, primary_key=True)
    game_id = db.Column(db.String(64), nullable=False, index=True)
    winner_id = db.Column(db.String(64), nullable=False, index=True)
    loser_id = db.Column(db.String(64), nullable=False, index=True)
    reason = db.Column(db.String(16), nullable=False)  # bust, timeout
    winner_coins = db.Column(db.Integer, nullable=False, default=0)
    loser_coins = db.Column(db.Integer, nullable=False, default=0)
    finished_at = db.Column(db.BigInteger, nullable=False)  # epoch ms

    def to_dict(self):
        return {
            'id': self.id,
            'gameId': self.game_id,
            'winner': self.winner_id,
            'loser': self.loser_id,
            'reason': self.reason,
            'winnerCoins': self.winner_coins,
            'loserCoins': self.loser_coins,
            'finishedAt': self.finished_at,
        }
