from __future__ import annotations

import logging
from datetime import datetime
from typing import List, Optional

from sqlalchemy.orm import Session

from .models import UploadAttempt, UploadRun

logger = logging.getLogger(__name__)


class RunRecorder:
    """Writes one UploadRun row per batch and one UploadAttempt row per attempted emoji."""

    def __init__(self, db: Session):
        self.db = db
        self.run_id: Optional[int] = None

    def start(self, title: str, host: str, manifest: str) -> int:
        run = UploadRun(
            title=title or None,
            host=host,
            manifest=manifest or None,
            status="running",
            started_at=datetime.utcnow(),
        )
        self.db.add(run)
        self.db.commit()
        self.db.refresh(run)
        self.run_id = int(run.id)
        return self.run_id

    def item(self, outcome) -> None:
        if self.run_id is None:
            return
        self.db.add(
            UploadAttempt(
                run_id=self.run_id,
                position=outcome.index,
                name=outcome.name,
                src=outcome.src,
                ok=bool(outcome.ok),
                error=None if outcome.ok else str(outcome.error),
                attempted_at=datetime.utcnow(),
            )
        )
        self.db.commit()

    def finish(self, report, message: Optional[str] = None) -> None:
        if self.run_id is None:
            return
        run = self.db.get(UploadRun, self.run_id)
        if run is None:
            return
        run.finished_at = datetime.utcnow()
        if message:
            run.status = "error"
            run.message = message
        else:
            run.status = report.status
            if report.auth_error is not None:
                run.message = str(report.auth_error)
            elif report.failed:
                run.message = f"Completed with failures ({report.uploaded} uploaded, {len(report.failed)} failed)"
            else:
                run.message = f"OK ({report.uploaded} uploaded)"
        self.db.commit()
        logger.debug("run %s finished: %s", self.run_id, run.status)


def recent_runs(db: Session, limit: int = 10) -> List[UploadRun]:
    return (
        db.query(UploadRun)
        .order_by(UploadRun.started_at.desc(), UploadRun.id.desc())
        .limit(max(1, int(limit)))
        .all()
    )


def failed_attempts(db: Session, run_id: int) -> List[UploadAttempt]:
    return (
        db.query(UploadAttempt)
        .filter(UploadAttempt.run_id == run_id, UploadAttempt.ok == False)  # noqa: E712
        .order_by(UploadAttempt.position.asc())
        .all()
    )


def uploaded_count(db: Session, run_id: int) -> int:
    return (
        db.query(UploadAttempt)
        .filter(UploadAttempt.run_id == run_id, UploadAttempt.ok == True)  # noqa: E712
        .count()
    )
