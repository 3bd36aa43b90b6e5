# app/core/sweeper.py
import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from sqlalchemy.orm import Session

from app.core import clock
from app.core.config import settings
from app.crud import attendance as crud_attendance

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SweepResult:
    records_absent: int
    sessions_closed: int


def run_expiry_sweep(db: Session, now: datetime) -> SweepResult:
    """One pass over persisted state; safe to repeat and to run alongside marking.

    Pending records of ended sessions become absent, then ended sessions
    are switched off. Nothing is remembered between passes, so a pass
    interrupted half way is finished by the next one.
    """
    records_absent = crud_attendance.mark_pending_absent(db, now)
    sessions_closed = crud_attendance.deactivate_expired_sessions(db, now)
    if records_absent or sessions_closed:
        logger.info(
            f"Sweep at {now:%Y-%m-%d %H:%M}: {records_absent} records marked absent, "
            f"{sessions_closed} sessions closed"
        )
    return SweepResult(records_absent=records_absent, sessions_closed=sessions_closed)


def sweep_once(now: Optional[datetime] = None) -> SweepResult:
    """Runs a sweep with its own DB session, as the background task does."""
    from app.db.session import SessionLocal

    db = SessionLocal()
    try:
        return run_expiry_sweep(db, now or clock.now())
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


async def expiry_sweep_loop(interval: Optional[int] = None) -> None:
    interval = interval or settings.SWEEP_INTERVAL_SECONDS
    logger.info(f"Expiry sweep started, every {interval}s")
    while True:
        try:
            await asyncio.to_thread(sweep_once)
        except Exception:
            # tick abandoned, the next one re-reads the whole state
            logger.exception("Expiry sweep failed")
        await asyncio.sleep(interval)
