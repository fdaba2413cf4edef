from typing import List

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from ticketing.db.session import get_db
from ticketing.api.deps import get_current_admin
from ticketing.models.event import Event
from ticketing.schemas.catalog import Event as EventSchema, EventCreate

router = APIRouter(prefix="/admin/events", tags=["Admin - Events"])


@router.post("/", response_model=EventSchema, status_code=status.HTTP_201_CREATED)
def create_event(
    data: EventCreate,
    db: Session = Depends(get_db),
    admin: dict = Depends(get_current_admin),
):
    title = data.title.strip()
    if db.query(Event).filter(Event.title == title).first():
        raise HTTPException(status_code=409, detail="An event with this title already exists")

    event = Event(**data.model_dump(exclude={"title"}), title=title)
    db.add(event)
    db.commit()
    db.refresh(event)
    return event


@router.get("/", response_model=List[EventSchema])
def list_events(
    db: Session = Depends(get_db),
    admin: dict = Depends(get_current_admin),
):
    return db.query(Event).order_by(Event.created_at.desc()).all()
