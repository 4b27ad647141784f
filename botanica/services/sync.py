# botanica/services/sync.py
from __future__ import annotations

import logging
import threading
from datetime import datetime
from typing import Any, Callable, Dict, Optional

from sqlalchemy.orm import Session

from ..models import utcnow
from .orders import OrderService, SyncReport

log = logging.getLogger(__name__)


class FullSyncRunner:
    """Runs the full order → sheet sync in the background, one run at a time.

    `claim()` must succeed before `run()` is scheduled; a second trigger while
    a run is in progress is refused instead of syncing twice.
    """

    def __init__(self, session_factory: Callable[[], Session], build_service: Callable[[Session], OrderService]):
        self.session_factory = session_factory
        self.build_service = build_service
        self._lock = threading.Lock()
        self._running = False
        self.started_at: Optional[datetime] = None
        self.finished_at: Optional[datetime] = None
        self.last_report: Optional[SyncReport] = None
        self.last_error: Optional[str] = None

    @property
    def running(self) -> bool:
        with self._lock:
            return self._running

    def claim(self) -> bool:
        with self._lock:
            if self._running:
                return False
            self._running = True
            self.started_at = utcnow()
            self.finished_at = None
            return True

    def run(self) -> None:
        db = self.session_factory()
        try:
            self.last_report = self.build_service(db).sync_all_orders()
            self.last_error = None
        except Exception as e:
            log.exception("full sync failed")
            self.last_report = None
            self.last_error = str(e) or e.__class__.__name__
        finally:
            db.close()
            with self._lock:
                self._running = False
                self.finished_at = utcnow()

    def status(self) -> Dict[str, Any]:
        with self._lock:
            return {
                "running": self._running,
                "startedAt": self.started_at.isoformat() if self.started_at else None,
                "finishedAt": self.finished_at.isoformat() if self.finished_at else None,
                "report": self.last_report.as_dict() if self.last_report else None,
                "error": self.last_error,
            }
