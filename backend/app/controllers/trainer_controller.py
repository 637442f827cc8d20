from sqlalchemy import delete, select
from sqlmodel.ext.asyncio.session import AsyncSession

from app.core.exceptions import APIError
from app.models.trainer import Trainer
from app.schemas.trainer import TrainerCreate, TrainerUpdate


async def create_trainer(payload: TrainerCreate, db: AsyncSession) -> Trainer:
    trainer = Trainer(name=payload.name, trainer_class=payload.trainer_class)
    db.add(trainer)
    await db.flush()
    await db.refresh(trainer)
    return trainer


async def get_trainers(db: AsyncSession) -> list[Trainer]:
    result = await db.execute(select(Trainer).order_by(Trainer.id))
    return list(result.scalars().all())


async def get_trainer(trainer_id: int, db: AsyncSession) -> Trainer:
    trainer = await db.get(Trainer, trainer_id)
    if not trainer:
        raise APIError(404, error="Trainer not found")
    return trainer


async def update_trainer(trainer_id: int, payload: TrainerUpdate, db: AsyncSession) -> Trainer:
    trainer = await get_trainer(trainer_id, db)

    for field, value in payload.model_dump(exclude_unset=True, exclude_none=True).items():
        setattr(trainer, field, value)

    db.add(trainer)
    await db.flush()
    await db.refresh(trainer)
    return trainer


async def delete_trainer(trainer_id: int, db: AsyncSession) -> int:
    """Delete by id. Returns the number of rows removed (0 if it did not exist)."""
    result = await db.execute(delete(Trainer).where(Trainer.id == trainer_id))
    return result.rowcount or 0
