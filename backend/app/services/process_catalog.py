"""
Service layer for the manufacturing process catalog.

Routing steps copy pricing from processes through make_process_lookup().
"""
from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from app.exceptions import InvalidReferenceError
from app.logging_config import get_logger
from app.models.process import Process
from app.services.category_resolver import get_category
from app.services.routing_draft import ProcessInfo
from app.services.routing_sequencer import ProcessLookup

logger = get_logger(__name__)


def get_process(db: Session, process_id: str) -> Process:
    process = db.get(Process, process_id)
    if not process:
        raise InvalidReferenceError("Process", process_id)
    return process


def get_process_info(db: Session, process_id: str) -> Optional[ProcessInfo]:
    """Pricing view of a process, or None if the id is unknown."""
    process = db.get(Process, process_id)
    if process is None:
        return None
    return ProcessInfo.from_model(process)


def make_process_lookup(db: Session) -> ProcessLookup:
    """Bind the catalog lookup to a session for use by RoutingSequencer."""
    def lookup(process_id: str) -> Optional[ProcessInfo]:
        return get_process_info(db, process_id)
    return lookup


def list_processes(
    db: Session,
    active_only: bool = True,
    category_id: Optional[str] = None,
    search: Optional[str] = None,
) -> List[Process]:
    query = db.query(Process)
    if active_only:
        query = query.filter(Process.is_active.is_(True))
    if category_id:
        query = query.filter(Process.category_id == category_id)
    if search:
        query = query.filter(
            (Process.name.ilike(f"%{search}%")) |
            (Process.description.ilike(f"%{search}%"))
        )
    return query.order_by(Process.name).all()


def create_process(db: Session, data: Dict[str, Any]) -> Process:
    if data.get("category_id"):
        get_category(db, data["category_id"], "process")

    process = Process(**data)
    db.add(process)
    db.commit()
    db.refresh(process)

    logger.info(f"Created process: {process.name}", extra={"process_id": process.id})
    return process


def update_process(db: Session, process_id: str, data: Dict[str, Any]) -> Process:
    """
    Update a process.

    Existing routing steps keep the pricing they copied when created.
    """
    process = get_process(db, process_id)
    if data.get("category_id"):
        get_category(db, data["category_id"], "process")

    for field, value in data.items():
        setattr(process, field, value)
    process.updated_at = datetime.utcnow()

    db.commit()
    db.refresh(process)

    logger.info(f"Updated process: {process.name}", extra={"process_id": process.id})
    return process
