# src/cloud_client/core/session_manager.py
"""
Thread-local requests.Session pool.

Session.request must be safe to call from several threads, each Waiter
or PaginatedIterator being driven by its own thread. Each thread gets its
own requests.Session.
"""
import threading
from typing import Callable, List

import requests


class ThreadSafeSessionManager:
    """
    Manages thread-local requests.Session instances.

    Example:
        >>> manager = ThreadSafeSessionManager(requests.Session)
        >>> session = manager.get_session()  # Gets thread-local session
        >>> manager.close_all()
    """

    def __init__(self, session_factory: Callable[[], requests.Session]):
        """
        Args:
            session_factory: Callable that creates and configures a new Session
        """
        self._session_factory = session_factory
        self._local = threading.local()
        self._all_sessions: List[requests.Session] = []
        self._sessions_lock = threading.Lock()

    def get_session(self) -> requests.Session:
        """Thread-local session, created lazily."""
        session = getattr(self._local, 'session', None)
        if session is None:
            session = self._session_factory()
            self._local.session = session
            with self._sessions_lock:
                self._all_sessions.append(session)
        return session

    def close_all(self) -> None:
        """
        Close sessions of all threads. Safe to call multiple times.
        """
        with self._sessions_lock:
            sessions, self._all_sessions = self._all_sessions, []

        for session in sessions:
            session.close()

        self._local = threading.local()

    def get_active_sessions_count(self) -> int:
        with self._sessions_lock:
            return len(self._all_sessions)
