"""Agreement repository - in-process storage for agreement sessions"""

import threading
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Optional

from .aggregation import AgreementState


def _now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class AgreementSession:
    """One salesperson's in-progress agreement"""

    id: str
    state: AgreementState
    forms: dict[str, dict[str, Any]] = field(default_factory=dict)
    created_at: datetime = field(default_factory=_now)
    updated_at: datetime = field(default_factory=_now)


class AgreementRepository:
    """Repository for agreement sessions, safe to share across request threads"""

    def __init__(self):
        self._sessions: dict[str, AgreementSession] = {}
        self._lock = threading.Lock()

    def create(self, state: AgreementState) -> AgreementSession:
        session = AgreementSession(id=uuid.uuid4().hex, state=state)
        with self._lock:
            self._sessions[session.id] = session
        return session

    def get(self, session_id: str) -> Optional[AgreementSession]:
        with self._lock:
            return self._sessions.get(session_id)

    def save(self, session: AgreementSession) -> AgreementSession:
        session.updated_at = _now()
        with self._lock:
            self._sessions[session.id] = session
        return session

    def clear(self) -> None:
        with self._lock:
            self._sessions.clear()


agreement_repository = AgreementRepository()
