#
# SPDX-License-Identifier: AGPL-3.0-only
# Copyright (c) 2026 m2-eng
# Author: m2-eng
# Co-Author: GitHub Copilot
# License: GNU Affero General Public License v3.0 (AGPL-3.0-only)
# Purpose: Thread-safe mapping of caller identity to session.
#
"""
Thread-safe mapping of caller identity to session.
"""

import logging
import threading
from typing import Dict, Hashable, List, Optional

from sqlwrapper.connection.pool import ConnectionPool
from sqlwrapper.connection.session import ConnectionEvent, Session

logger = logging.getLogger(__name__)


class SessionRegistry:
    """
    Sessions by caller id.

    The map is the only state shared between callers and is guarded by a
    lock. Pool acquisition happens outside the lock so a caller waiting for
    a connection does not hold up the others.
    """

    def __init__(self, pool: ConnectionPool):
        self._pool = pool
        self._sessions: Dict[Hashable, Session] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)

    def __contains__(self, caller_id: Hashable) -> bool:
        with self._lock:
            return caller_id in self._sessions

    def peek(self, caller_id: Hashable) -> Optional[Session]:
        with self._lock:
            return self._sessions.get(caller_id)

    def get(self, caller_id: Hashable, create_if_absent: bool = False) -> Optional[Session]:
        """
        Session of a caller.

        With create_if_absent and pooling enabled a caller without a live
        connection gets one from the pool: attached to its idle pooled
        session, or in a new pooled session.

        Raises:
            PoolTimeout: No pooled connection became available in time
        """
        session = self.peek(caller_id)
        if session is not None and session.is_connected():
            return session
        if not create_if_absent or not self._pool.enabled:
            return session

        if session is not None and not session.pooled:
            logger.info("Explicit connection of caller '%s' is gone; switching to the pool", caller_id)
            session.close()
            session = None

        connection = self._pool.acquire()

        if session is not None:
            session.attach(connection)
            logger.debug("Reattached pooled connection for caller '%s'", caller_id)
            return session

        dialect = self._pool.dialect
        session = Session(
            caller_id,
            connection,
            dialect,
            pooled=True,
            on_event=self.handle_event,
            autodisconnect=dialect.autodisconnect,
        )
        session.attach(connection)
        self.register(session)
        logger.debug("New pooled session for caller '%s'", caller_id)
        return session

    def register(self, session: Session) -> None:
        """Registers a session, closing the caller's previous one."""
        with self._lock:
            previous = self._sessions.get(session.caller_id)
            self._sessions[session.caller_id] = session
        if previous is not None and previous is not session:
            previous.close()

    def remove(self, session: Session) -> None:
        """Removes a session if it is still the one registered. Idempotent."""
        with self._lock:
            if self._sessions.get(session.caller_id) is session:
                del self._sessions[session.caller_id]

    def handle_event(self, session: Session, event: ConnectionEvent) -> None:
        """Event callback handed to every session."""
        if event is ConnectionEvent.CLOSE:
            self.remove(session)
        elif event is ConnectionEvent.AUTO_DISCONNECT:
            logger.debug("Caller '%s' released its pooled connection", session.caller_id)

    def sessions(self) -> List[Session]:
        with self._lock:
            return list(self._sessions.values())

    def close_all(self) -> int:
        """Closes every session and returns how many were closed."""
        sessions = self.sessions()
        for session in sessions:
            session.close()
        return len(sessions)

    def close_pooled(self) -> int:
        sessions = [session for session in self.sessions() if session.pooled]
        for session in sessions:
            session.close()
        if sessions:
            logger.info("Closed %s pooled session(s)", len(sessions))
        return len(sessions)
