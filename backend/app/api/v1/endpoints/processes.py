"""
Processes API Endpoints

The process catalog that routing steps copy their pricing from.
"""
from fastapi import APIRouter, Depends, status
from typing import List, Optional
from sqlalchemy.orm import Session

from app.db.session import get_db
from app.logging_config import get_logger
from app.models.process import Process
from app.schemas.common import ERROR_RESPONSES
from app.schemas.process import ProcessCreate, ProcessResponse, ProcessUpdate
from app.services import process_catalog

router = APIRouter()
logger = get_logger(__name__)


def _build_process_response(process: Process) -> ProcessResponse:
    response = ProcessResponse.model_validate(process)
    if process.category is not None:
        response.category_name = process.category.name
    return response


@router.get("/", response_model=List[ProcessResponse])
async def list_processes(
    active_only: bool = True,
    category_id: Optional[str] = None,
    search: Optional[str] = None,
    db: Session = Depends(get_db),
):
    """
    List processes.

    - **active_only**: Hide deactivated processes
    - **category_id**: Filter by process category
    - **search**: Match name or description
    """
    processes = process_catalog.list_processes(
        db, active_only=active_only, category_id=category_id, search=search
    )
    return [_build_process_response(p) for p in processes]


@router.get("/{process_id}", response_model=ProcessResponse, responses=ERROR_RESPONSES)
async def get_process(process_id: str, db: Session = Depends(get_db)):
    return _build_process_response(process_catalog.get_process(db, process_id))


@router.post(
    "/",
    response_model=ProcessResponse,
    status_code=status.HTTP_201_CREATED,
    responses=ERROR_RESPONSES,
)
async def create_process(request: ProcessCreate, db: Session = Depends(get_db)):
    process = process_catalog.create_process(db, request.model_dump())
    return _build_process_response(process)


@router.put("/{process_id}", response_model=ProcessResponse, responses=ERROR_RESPONSES)
async def update_process(process_id: str, request: ProcessUpdate, db: Session = Depends(get_db)):
    """
    Update a process.

    Routing steps already using this process keep the pricing they copied.
    """
    process = process_catalog.update_process(db, process_id, request.model_dump(exclude_unset=True))
    return _build_process_response(process)
