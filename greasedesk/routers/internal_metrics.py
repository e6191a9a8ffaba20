from __future__ import annotations

from fastapi import APIRouter, Depends

from greasedesk.core.metrics import request_metrics
from greasedesk.deps import require_admin_role
from greasedesk.services.tenant_context import TenantContext

router = APIRouter(prefix="/internal/metrics", tags=["internal-metrics"])


@router.get("/groups")
def group_metrics(context: TenantContext = Depends(require_admin_role)):
    return {
        "groupId": context.group_id,
        "metrics": request_metrics.snapshot_for_group(context.group_id),
    }
