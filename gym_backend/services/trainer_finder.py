"""Find trainers qualified for a service who are free at a given time."""

import logging
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime
from typing import Callable

from fastapi import status
from sqlalchemy import select
from sqlalchemy.orm import Session

from gym_backend.models.trainer import Trainer, TrainerSpecialty
from gym_backend.repositories.repository import Repository, active
from gym_backend.schemas.responses import ServiceResponse
from gym_backend.services import results
from gym_backend.services.availability import check_trainer_availability

logger = logging.getLogger(__name__)


def find_candidate_trainer_ids(db: Session, service_id: int) -> list[int]:
    active_trainer_ids = select(Trainer.id).where(active(Trainer))
    specialties = Repository(db, TrainerSpecialty).list_where(
        TrainerSpecialty.service_id == service_id,
        TrainerSpecialty.trainer_id.in_(active_trainer_ids),
    )
    return sorted({specialty.trainer_id for specialty in specialties})


def _check_in_own_session(
    session_factory: Callable[[], Session], trainer_id: int, start: datetime, duration_minutes: int
) -> ServiceResponse:
    db = session_factory()
    try:
        return check_trainer_availability(db, trainer_id, start, duration_minutes)
    finally:
        db.close()


def find_available_trainers(
    db: Session,
    service_id: int,
    start: datetime,
    duration_minutes: int,
    max_workers: int = 1,
    session_factory: Callable[[], Session] | None = None,
) -> ServiceResponse:
    """Return the ids of qualified trainers passing the trainer availability check.

    With ``max_workers > 1`` and a ``session_factory`` the checks run on a
    bounded thread pool, each with its own session. Ids come back sorted.
    """
    rejected = results.invalid_duration(duration_minutes)
    if rejected:
        return rejected

    try:
        candidate_ids = find_candidate_trainer_ids(db, service_id)

        if max_workers > 1 and session_factory is not None and len(candidate_ids) > 1:
            with ThreadPoolExecutor(max_workers=min(max_workers, len(candidate_ids))) as executor:
                checks = list(
                    executor.map(
                        lambda trainer_id: _check_in_own_session(
                            session_factory, trainer_id, start, duration_minutes
                        ),
                        candidate_ids,
                    )
                )
        else:
            checks = [
                check_trainer_availability(db, trainer_id, start, duration_minutes)
                for trainer_id in candidate_ids
            ]

        if any(
            check.error is not None and check.error.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
            for check in checks
        ):
            return results.unexpected('Available trainers could not be determined.', results.TRAINER_SEARCH_FAILED)

        available_ids = [
            trainer_id for trainer_id, check in zip(candidate_ids, checks) if check.is_successful
        ]
        logger.debug(
            'Trainer search for service %s at %s: %s of %s candidates free',
            service_id, start, len(available_ids), len(candidate_ids),
        )
        return results.success(available_ids)
    except Exception:
        logger.exception('Trainer search failed. service_id=%s start=%s', service_id, start)
        return results.unexpected('Available trainers could not be determined.', results.TRAINER_SEARCH_FAILED)
