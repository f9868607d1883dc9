from __future__ import annotations
import logging
from datetime import datetime, timedelta, timezone

from . import sessions

logger = logging.getLogger(__name__)


def purge_stale_sessions(max_age: timedelta) -> int:
	threshold = datetime.now(timezone.utc) - max_age
	# Drop exam sessions created before the threshold; closing cancels their timers
	removed = 0
	for session in sessions.all_sessions():
		if session.created_at < threshold:
			sessions.close_session(session.session_id)
			removed += 1
	if removed:
		logger.info("Purged %d stale exam sessions", removed)
	return removed
