import threading

from flask import current_app

from mission_timer import db
from mission_timer.exceptions import NotFoundError
from mission_timer.models import LeaderboardEntry
from mission_timer.validation import clean_name, clean_time_ms

MISSING = object()

# Every read-modify-write against the table runs under this lock so that
# racing edits in the same process never lose an update.
_store_lock = threading.Lock()


def list_entries(limit=None):
    """Return entries as dicts, fastest first, capped at LEADERBOARD_LIMIT."""
    if limit is None:
        limit = int(current_app.config.get('LEADERBOARD_LIMIT', 100))
    rows = (
        LeaderboardEntry.query
        .order_by(LeaderboardEntry.time_ms.asc(), LeaderboardEntry.created_at.asc())
        .limit(limit)
        .all()
    )
    return [row.to_dict() for row in rows]


def insert_entry(name, time_ms):
    clean = clean_name(name)
    millis = clean_time_ms(time_ms)
    with _store_lock:
        entry = LeaderboardEntry(name=clean, time_ms=millis)
        db.session.add(entry)
        _commit()
        current_app.logger.info(f"[leaderboard-insert] id={entry.id} name={entry.name!r} time_ms={entry.time_ms}")
        return entry.to_dict()


def update_entry(entry_id, name=MISSING, time_ms=MISSING):
    """Apply the supplied fields to an entry.

    Every supplied field is validated before anything is written, so a bad
    time never leaves a half-applied rename behind.
    """
    changes = {}
    with _store_lock:
        entry = _get_or_raise(entry_id)
        if name is not MISSING:
            changes['name'] = clean_name(name)
        if time_ms is not MISSING:
            changes['time_ms'] = clean_time_ms(time_ms)
        for field, value in changes.items():
            setattr(entry, field, value)
        if changes:
            db.session.add(entry)
            _commit()
            current_app.logger.info(f"[leaderboard-update] id={entry.id} fields={sorted(changes)}")
        return entry.to_dict()


def delete_entry(entry_id):
    with _store_lock:
        entry = _get_or_raise(entry_id)
        removed = entry.to_dict()
        db.session.delete(entry)
        _commit()
        current_app.logger.info(f"[leaderboard-delete] id={entry_id}")
        return removed


def reset_entries():
    """Remove every entry and return how many were deleted."""
    with _store_lock:
        removed = LeaderboardEntry.query.delete()
        _commit()
        current_app.logger.info(f"[leaderboard-reset] removed={removed}")
        return removed


def _get_or_raise(entry_id):
    entry = db.session.get(LeaderboardEntry, entry_id) if entry_id else None
    if entry is None:
        raise NotFoundError('Entry not found')
    return entry


def _commit():
    try:
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise
