"""
Audit Logs API - View audit trail and statistics
"""

from fastapi import APIRouter, Depends, HTTPException, status, Query
from sqlalchemy.orm import Session, joinedload
from sqlalchemy import func, or_
from typing import Optional
from datetime import datetime
from uuid import UUID
import logging

from flowpilot.database import get_db
from flowpilot.schemas import AuditLogResponse, AuditLogListResponse, AuditStatsResponse
from flowpilot.models import AuditLog, User, AuditAction, DOMAIN_ACTIONS, AUDIT_STATUS_SUCCESS
from flowpilot.core.dependencies import get_current_user
from flowpilot.utils.search import LIKE_ESCAPE, contains_pattern

logger = logging.getLogger(__name__)
router = APIRouter()

def _paginate(query, page: int, limit: int) -> AuditLogListResponse:
    total = query.count()
    offset = (page - 1) * limit
    logs = (
        query.options(joinedload(AuditLog.user))
        .order_by(AuditLog.created_at.desc())
        .offset(offset)
        .limit(limit)
        .all()
    )
    logger.info(f"✅ Returning {len(logs)} audit logs (total: {total})")
    return AuditLogListResponse(
        logs=[AuditLogResponse.model_validate(log) for log in logs],
        total=total,
        page=page,
        limit=limit
    )

@router.get("/logs", response_model=AuditLogListResponse)
def get_audit_logs(
    page: int = Query(1, ge=1),
    limit: int = Query(50, ge=1, le=100),
    action: Optional[str] = Query(None, description="Filter by action name"),
    user_id: Optional[UUID] = Query(None, alias="userId", description="Filter by user ID"),
    status_filter: Optional[str] = Query(None, alias="status", description="success or failure"),
    start_date: Optional[datetime] = Query(None, alias="startDate", description="Filter from date"),
    end_date: Optional[datetime] = Query(None, alias="endDate", description="Filter to date"),
    search: Optional[str] = Query(None, description="Text in description or details"),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    Get paginated audit logs, newest first.

    Query parameters:
        - page: Page number
        - limit: Items per page (max 100)
        - action, userId, status: Exact match filters
        - startDate / endDate: Inclusive time range
        - search: Case-insensitive match on description or details
    """
    logger.info(f"➡️  Get audit logs request from: {current_user.email}")

    query = db.query(AuditLog)

    if action:
        query = query.filter(AuditLog.action == action)
    if user_id:
        query = query.filter(AuditLog.user_id == user_id)
    if status_filter:
        query = query.filter(AuditLog.status == status_filter)
    if start_date:
        query = query.filter(AuditLog.created_at >= start_date)
    if end_date:
        query = query.filter(AuditLog.created_at <= end_date)
    if search:
        pattern = contains_pattern(search)
        query = query.filter(or_(
            AuditLog.description.ilike(pattern, escape=LIKE_ESCAPE),
            AuditLog.details.ilike(pattern, escape=LIKE_ESCAPE),
        ))

    return _paginate(query, page, limit)

@router.get("/logs/success", response_model=AuditLogListResponse)
def get_successful_domain_logs(
    page: int = Query(1, ge=1),
    limit: int = Query(50, ge=1, le=100),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    Current user's successful project and task actions.

    Feeds the activity page; logins, reads and failures are left out.
    """
    logger.info(f"➡️  Get activity feed request from: {current_user.email}")

    query = db.query(AuditLog).filter(
        AuditLog.user_id == current_user.id,
        AuditLog.status == AUDIT_STATUS_SUCCESS,
        AuditLog.action.in_(DOMAIN_ACTIONS),
    )
    return _paginate(query, page, limit)

@router.get("/logs/{log_id}", response_model=AuditLogResponse)
def get_audit_log(
    log_id: UUID,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    Get single audit log entry by ID.

    Raises:
        404: Log not found
    """
    logger.info(f"➡️  Get audit log {log_id} request from: {current_user.email}")

    log = db.query(AuditLog).filter(AuditLog.id == log_id).first()
    if not log:
        logger.warning(f"⚠️  Audit log {log_id} not found")
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Audit log with ID {log_id} not found"
        )

    return AuditLogResponse.model_validate(log)

@router.get("/stats", response_model=AuditStatsResponse)
def get_audit_stats(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Aggregated audit metrics for the dashboard"""
    logger.info(f"➡️  Get audit stats request from: {current_user.email}")

    total_events = db.query(func.count(AuditLog.id)).scalar()

    today_start = datetime.utcnow().replace(hour=0, minute=0, second=0, microsecond=0)
    events_today = db.query(func.count(AuditLog.id)).filter(
        AuditLog.created_at >= today_start
    ).scalar()

    failed_logins = db.query(func.count(AuditLog.id)).filter(
        AuditLog.action == AuditAction.LOGIN_FAILED
    ).scalar()

    active_users = db.query(func.count(func.distinct(AuditLog.user_id))).scalar()

    per_action = (
        db.query(AuditLog.action, func.count(AuditLog.id))
        .group_by(AuditLog.action)
        .all()
    )

    logger.info("✅ Returning audit statistics")

    return AuditStatsResponse(
        total_events=total_events or 0,
        events_today=events_today or 0,
        failed_logins=failed_logins or 0,
        active_users=active_users or 0,
        actions={action: count for action, count in per_action}
    )
