from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.orm import Session

from salesboard.core.database import get_db

router = APIRouter()


@router.get("/health")
def health(db: Session = Depends(get_db)):
    db.execute(text("SELECT 1"))
    return {"status": "ok"}
