"""
Document Endpoints.

Documents are metadata records pointing at files stored elsewhere.
"""

from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from unipivot.core.database import get_session
from unipivot.core.database.entities.users import User
from unipivot.core.models.io.business import DocumentCreate, DocumentRead, DocumentUpdate
from unipivot.server.deps import require_admin
from unipivot.server.services import business as business_service

router = APIRouter(tags=["documents"])


@router.get(
    "",
    response_model=List[DocumentRead],
    summary="List Documents",
    description="Documents newest first, optionally only those of one project.",
    responses={403: {"description": "ADMIN grade required"}},
)
async def list_documents(
    project_id: Optional[int] = None,
    _: User = Depends(require_admin),
    session: AsyncSession = Depends(get_session),
) -> List[DocumentRead]:
    documents = await business_service.list_documents(session, project_id)
    return [DocumentRead.model_validate(d) for d in documents]


@router.get(
    "/{document_id}",
    response_model=DocumentRead,
    summary="Get Document",
    responses={404: {"description": "Document not found"}},
)
async def get_document(
    document_id: int,
    _: User = Depends(require_admin),
    session: AsyncSession = Depends(get_session),
) -> DocumentRead:
    return DocumentRead.model_validate(await business_service.get_document_or_404(session, document_id))


@router.post(
    "",
    response_model=DocumentRead,
    status_code=status.HTTP_201_CREATED,
    summary="Register Document",
    responses={201: {"description": "Document registered"}, 404: {"description": "Project not found"}},
)
async def create_document(
    data: DocumentCreate,
    current_user: User = Depends(require_admin),
    session: AsyncSession = Depends(get_session),
) -> DocumentRead:
    """
    Register a document.

    - **file_path**: Location of the stored file.
    - **type**: Free-form category such as REPORT, CONTRACT or OTHER.
    - **project_id**: Optional project the document belongs to.
    """
    document = await business_service.create_document(session, current_user, data)
    return DocumentRead.model_validate(document)


@router.patch(
    "/{document_id}",
    response_model=DocumentRead,
    summary="Update Document",
    responses={404: {"description": "Document or project not found"}},
)
async def update_document(
    document_id: int,
    data: DocumentUpdate,
    _: User = Depends(require_admin),
    session: AsyncSession = Depends(get_session),
) -> DocumentRead:
    document = await business_service.update_document(session, document_id, data)
    return DocumentRead.model_validate(document)


@router.delete(
    "/{document_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete Document",
    responses={204: {"description": "Document deleted"}, 404: {"description": "Document not found"}},
)
async def delete_document(
    document_id: int,
    _: User = Depends(require_admin),
    session: AsyncSession = Depends(get_session),
) -> None:
    await business_service.delete_document(session, document_id)
