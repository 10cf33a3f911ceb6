"""
Complaint endpoints - submission, listing, assignment and resolution.

Domain errors (ValidationError, NotFoundError, ...) propagate to the
handler registered in app.main, which renders {"error": message}.
"""

from typing import List
import logging

from fastapi import APIRouter, Depends, HTTPException, status

from app.core.errors import ComplaintError
from app.models.complaint import AssignRequest, ComplaintCreate, ComplaintResponse, ResolveRequest
from app.models.user import OPERATOR_ROLES, REPORTER_ROLES, Actor
from app.services.complaint_lifecycle import ComplaintLifecycleCoordinator, get_complaint_lifecycle
from app.utils.security import require_roles

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/complaints", tags=["Complaints"])


@router.post("", response_model=ComplaintResponse)
async def submit_complaint(
    complaint: ComplaintCreate,
    actor: Actor = Depends(require_roles(*REPORTER_ROLES)),
    lifecycle: ComplaintLifecycleCoordinator = Depends(get_complaint_lifecycle),
):
    """
    Submit a new complaint.

    This endpoint:
    1. Validates the title and priority
    2. Stores the complaint with status=open and its severity score
    3. Credits the reporter with eco-points (best-effort)
    4. Broadcasts complaint:new
    """
    try:
        logger.info(f"📝 POST /complaints - user={actor.id}, category={complaint.category}, priority={complaint.priority}")
        record = lifecycle.create_complaint(actor, complaint)
        return ComplaintResponse.from_record(record)
    except (HTTPException, ComplaintError):
        raise
    except Exception as e:
        logger.error(f"❌ POST /complaints - Complaint creation failed: {str(e)}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=str(e) or "Failed to create complaint"
        )


@router.get("", response_model=List[ComplaintResponse])
async def get_complaints(
    actor: Actor = Depends(require_roles(*REPORTER_ROLES)),
    lifecycle: ComplaintLifecycleCoordinator = Depends(get_complaint_lifecycle),
):
    """Admin/staff see all complaints, citizens only their own. Newest first."""
    try:
        return [ComplaintResponse.from_record(record) for record in lifecycle.list_complaints(actor)]
    except (HTTPException, ComplaintError):
        raise
    except Exception as e:
        logger.error(f"❌ GET /complaints - Failed to fetch complaints: {str(e)}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to fetch complaints"
        )


@router.post("/{complaint_id}/resolve", response_model=ComplaintResponse)
async def resolve_complaint(
    complaint_id: str,
    request: ResolveRequest,
    actor: Actor = Depends(require_roles(*OPERATOR_ROLES)),
    lifecycle: ComplaintLifecycleCoordinator = Depends(get_complaint_lifecycle),
):
    """
    Resolve a complaint. A proof image is mandatory.

    Raises:
        400: Proof image missing, complaint already resolved
        404: Complaint not found
    """
    try:
        record = lifecycle.resolve_complaint(actor, complaint_id, request.proof_image_url)
        return ComplaintResponse.from_record(record)
    except (HTTPException, ComplaintError):
        raise
    except Exception as e:
        logger.error(f"❌ Failed to resolve complaint {complaint_id}: {str(e)}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to resolve complaint"
        )


@router.post("/{complaint_id}/assign", response_model=ComplaintResponse)
async def assign_complaint(
    complaint_id: str,
    request: AssignRequest,
    actor: Actor = Depends(require_roles(*OPERATOR_ROLES)),
    lifecycle: ComplaintLifecycleCoordinator = Depends(get_complaint_lifecycle),
):
    """
    Assign a complaint to a response team.

    Raises:
        400: Team on break or team name missing
        404: Complaint not found/resolved, team not found
    """
    try:
        record = lifecycle.assign_complaint(actor, complaint_id, request.team)
        return ComplaintResponse.from_record(record)
    except (HTTPException, ComplaintError):
        raise
    except Exception as e:
        logger.error(f"❌ Failed to assign complaint {complaint_id}: {str(e)}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to assign complaint"
        )
