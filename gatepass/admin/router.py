from typing import Any, Dict

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from gatepass.admin.auth_service import AdminAuthService
from gatepass.admin.dependencies import get_auth_service, require_admin
from gatepass.admin.report_service import AdminReportService
from gatepass.admin.schemas import AdminLogin, AdminLoginResponse, BookingReport, BulkDeleteResponse
from gatepass.bookings.router import render_ticket_response
from gatepass.bookings.schemas import ScanRequest, ScanResult
from gatepass.bookings.ticket_service import TicketService
from gatepass.database import get_db
from gatepass.pricing.schemas import PriceUpdateRequest, PriceUpdateResponse
from gatepass.pricing.service import PricingService

router = APIRouter()


@router.post("/auth/login", response_model=AdminLoginResponse)
async def admin_login(
    login_data: AdminLogin,
    auth_service: AdminAuthService = Depends(get_auth_service),
):
    """Exchange admin credentials for a bearer token"""
    return auth_service.login(login_data.username, login_data.password)


@router.get("/bookings", response_model=BookingReport)
async def get_bookings(
    admin: Dict[str, Any] = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """All bookings, newest first, with revenue and ticket totals"""
    return await AdminReportService(db).build_report()


@router.delete("/bookings", response_model=BulkDeleteResponse)
async def delete_all_bookings(
    admin: Dict[str, Any] = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    deleted = await AdminReportService(db).delete_all_bookings()
    return BulkDeleteResponse(message=f"Deleted {deleted} bookings", deleted=deleted)


@router.post("/update-prices", response_model=PriceUpdateResponse)
async def update_prices(
    update: PriceUpdateRequest,
    admin: Dict[str, Any] = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    prices = await PricingService(db).update_prices(update)
    return PriceUpdateResponse(prices=prices)


@router.post("/verify-qr", response_model=ScanResult, response_model_exclude_none=True)
async def verify_qr(
    scan: ScanRequest,
    admin: Dict[str, Any] = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """Gate scan: check a ticket QR payload against the ledger"""
    return await TicketService(db).verify_scan(scan.qr_data)


@router.get("/download-ticket/{serial_number}")
async def admin_download_ticket(
    serial_number: str,
    admin: Dict[str, Any] = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    return await render_ticket_response(TicketService(db), serial_number)
