import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Path, status
from sqlmodel.ext.asyncio.session import AsyncSession

from app.api.deps import get_db
from app.controllers import trainer_controller
from app.core.exceptions import APIError
from app.schemas.trainer import TrainerCreate, TrainerRead, TrainerUpdate
from app.schemas.user import DeleteResult

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/trainer", tags=["trainers"])

TrainerId = Annotated[int, Path(ge=1, description="Numeric trainer id")]


@router.get("", response_model=list[TrainerRead])
async def list_trainers(db: AsyncSession = Depends(get_db)):
    return await trainer_controller.get_trainers(db)


@router.get("/{trainer_id}", response_model=TrainerRead)
async def get_trainer(trainer_id: TrainerId, db: AsyncSession = Depends(get_db)):
    return await trainer_controller.get_trainer(trainer_id, db)


@router.post("", response_model=TrainerRead, status_code=status.HTTP_201_CREATED)
async def create_trainer(payload: TrainerCreate, db: AsyncSession = Depends(get_db)):
    return await trainer_controller.create_trainer(payload, db)


@router.patch("/{trainer_id}", response_model=TrainerRead)
async def update_trainer(
    trainer_id: TrainerId,
    payload: TrainerUpdate,
    db: AsyncSession = Depends(get_db),
):
    return await trainer_controller.update_trainer(trainer_id, payload, db)


@router.delete("/{trainer_id}", response_model=DeleteResult)
async def delete_trainer(trainer_id: TrainerId, db: AsyncSession = Depends(get_db)):
    try:
        affected = await trainer_controller.delete_trainer(trainer_id, db)
    except Exception:
        logger.exception("Delete trainer %s failed", trainer_id)
        raise APIError(500, error="Delete trainer failed")
    return DeleteResult(affected=affected)
