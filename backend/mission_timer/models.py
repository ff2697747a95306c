from mission_timer import db
import random
import string
import time

_ID_ALPHABET = string.digits + string.ascii_lowercase


def _base36(value):
    if value <= 0:
        return '0'
    digits = []
    while value:
        value, rem = divmod(value, 36)
        digits.append(_ID_ALPHABET[rem])
    return ''.join(reversed(digits))


def generate_entry_id(suffix_length=6):
    """Generate a unique, opaque entry id: base-36 epoch millis plus a random tail."""
    while True:
        code = _base36(int(time.time() * 1000)) + ''.join(random.choices(_ID_ALPHABET, k=suffix_length))
        if not db.session.get(LeaderboardEntry, code):
            return code


class LeaderboardEntry(db.Model):
    __tablename__ = 'leaderboard_entry'
    id = db.Column(db.String(32), primary_key=True)
    name = db.Column(db.String(128), nullable=False)
    time_ms = db.Column(db.BigInteger, nullable=False, index=True)
    # Tie-break for equal times: earlier submissions rank first
    created_at = db.Column(db.Float, nullable=False, default=time.time)

    def __init__(self, **kwargs):
        super(LeaderboardEntry, self).__init__(**kwargs)
        if not self.id:
            self.id = generate_entry_id()
        if self.created_at is None:
            self.created_at = time.time()

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'timeMs': self.time_ms,
        }
