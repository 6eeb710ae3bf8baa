"""
Admin Module

Credential login with expiring bearer tokens, the booking report with revenue
aggregates, price updates, gate-scan verification and ledger deletion.
"""

from .router import router
from .auth_service import AdminAuthService
from .report_service import AdminReportService

__all__ = ["router", "AdminAuthService", "AdminReportService"]
