from fastapi import FastAPI, HTTPException, Depends, Request
from fastapi.responses import JSONResponse
from uuid import UUID
from datetime import date, timedelta
from typing import List, Optional
from fastapi.security import OAuth2PasswordRequestForm

from api.schemas import (
    # Room types
    CreateRoomTypeRequest, UpdateRoomTypeRequest, RoomTypeResponse,
    # Reservation
    CreateReservationRequest, RescheduleReservationRequest, CancelReservationRequest,
    ReservationResponse, PricingResponse, RejectionResponse, ConflictResponse,
    # Availability
    OccupancyResponse, DayAvailabilityResponse, AvailabilityCalendarResponse,
    UnavailableDatesResponse, AvailabilityQuoteResponse,
    # Auth
    Token, UserResponse
)

from api.dependencies import get_current_active_user, fake_users_db, get_user
from infrastructure.security import verify_password, create_access_token, ACCESS_TOKEN_EXPIRE_MINUTES
from domain.auth import User

from application.admission import AdmissionController
from application.occupancy import OccupancyService
from application.services import ReservationService, CatalogService
from infrastructure.repositories.in_memory_repositories import (
    InMemoryReservationRepository, InMemoryRoomTypeRepository
)
from infrastructure.clock import SystemClock
from infrastructure.locks import RoomTypeLocks
from infrastructure.notifications import LoggingNotificationSender
from infrastructure.observability import configure_logging
from domain.decisions import Rejected
from domain.enums import ReservationStatus, RejectionReason
from domain.errors import ConcurrentModificationError, ReferenceGenerationFailed, StorageUnavailable

configure_logging()

app = FastAPI(
    title="Room Inventory API",
    description="Availability and admission control for pooled hotel room inventory",
    version="1.0.0"
)

# Initialize repositories
room_type_repo = InMemoryRoomTypeRepository()
reservation_repo = InMemoryReservationRepository()

# One lock registry per process; every admission path must share it
room_type_locks = RoomTypeLocks()
clock = SystemClock()
notifier = LoggingNotificationSender()

# Dependency injection
def get_admission_controller() -> AdmissionController:
    return AdmissionController(
        room_type_repo, reservation_repo, locks=room_type_locks, clock=clock, notifier=notifier
    )

def get_occupancy_service() -> OccupancyService:
    return OccupancyService(reservation_repo, room_type_repo, clock=clock)

def get_reservation_service() -> ReservationService:
    return ReservationService(reservation_repo, clock=clock)

def get_catalog_service() -> CatalogService:
    return CatalogService(room_type_repo)

_REJECTION_STATUS = {
    RejectionReason.ROOM_UNAVAILABLE: 404,
    RejectionReason.INVENTORY_CONFLICT: 409,
}

# ============================================================================
# ERROR HANDLERS
# ============================================================================

@app.exception_handler(StorageUnavailable)
async def storage_unavailable_handler(request: Request, exc: StorageUnavailable):
    return JSONResponse(status_code=503, content={"detail": "Reservation store is unavailable, please retry"})

@app.exception_handler(ReferenceGenerationFailed)
async def reference_generation_failed_handler(request: Request, exc: ReferenceGenerationFailed):
    return JSONResponse(status_code=503, content={"detail": "Could not allocate a booking reference, please retry"})

@app.exception_handler(ConcurrentModificationError)
async def concurrent_modification_handler(request: Request, exc: ConcurrentModificationError):
    return JSONResponse(status_code=409, content={"detail": str(exc)})

# ============================================================================
# HEALTH & ENUM REFERENCE ENDPOINTS
# ============================================================================

@app.get("/api/health", tags=["Health"])
async def health_check():
    """Health check endpoint"""
    return {"status": "healthy", "message": "API is running"}

@app.get("/api/enums/reservation-status", tags=["Enum Reference"])
async def get_reservation_statuses():
    """Get all ReservationStatus enum values"""
    return {
        "values": [item.value for item in ReservationStatus],
        "description": "Reservation status values: PENDING, CONFIRMED, CANCELLED, COMPLETED"
    }

@app.get("/api/enums/rejection-reason", tags=["Enum Reference"])
async def get_rejection_reasons():
    """Get all RejectionReason codes with their messages"""
    return {
        "values": {item.code: item.message for item in RejectionReason},
        "description": "Reasons a booking request can be turned down"
    }

# ============================================================================
# AUTH ENDPOINTS
# ============================================================================

@app.post("/token", response_model=Token, tags=["Auth"])
async def login_for_access_token(form_data: OAuth2PasswordRequestForm = Depends()):
    user = get_user(fake_users_db, form_data.username)
    if not user or not verify_password(form_data.password, user.hashed_password):
        raise HTTPException(
            status_code=401,
            detail="Incorrect username or password",
            headers={"WWW-Authenticate": "Bearer"},
        )
    access_token_expires = timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES)
    access_token = create_access_token(
        data={"sub": user.username}, expires_delta=access_token_expires
    )
    return {"access_token": access_token, "token_type": "bearer"}

@app.get("/users/me", response_model=UserResponse, tags=["Auth"])
async def read_users_me(current_user: User = Depends(get_current_active_user)):
    return current_user

# ============================================================================
# ROOM TYPE ENDPOINTS
# ============================================================================

@app.post("/api/room-types", response_model=RoomTypeResponse, status_code=201, tags=["Room Types"])
async def create_room_type(
    request: CreateRoomTypeRequest,
    service: CatalogService = Depends(get_catalog_service),
    current_user: User = Depends(get_current_active_user)
):
    """Add a room type to the catalog"""
    try:
        room_type = await service.add_room_type(**request.model_dump())
        return _room_type_to_response(room_type)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

@app.get("/api/room-types", response_model=List[RoomTypeResponse], tags=["Room Types"])
async def list_room_types(
    bookable_only: bool = False,
    service: CatalogService = Depends(get_catalog_service)
):
    """List room types ordered by name"""
    room_types = await service.list_room_types(bookable_only=bookable_only)
    return [_room_type_to_response(rt) for rt in room_types]

@app.get("/api/room-types/{room_type_id}", response_model=RoomTypeResponse, tags=["Room Types"])
async def get_room_type(
    room_type_id: str,
    service: CatalogService = Depends(get_catalog_service)
):
    """Get room type by ID"""
    room_type = await service.get_room_type(room_type_id)
    if not room_type:
        raise HTTPException(status_code=404, detail="Room type not found")
    return _room_type_to_response(room_type)

@app.patch("/api/room-types/{room_type_id}", response_model=RoomTypeResponse, tags=["Room Types"])
async def update_room_type(
    room_type_id: str,
    request: UpdateRoomTypeRequest,
    service: CatalogService = Depends(get_catalog_service),
    current_user: User = Depends(get_current_active_user)
):
    """Edit room type attributes; existing reservations keep their price"""
    try:
        room_type = await service.update_room_type(room_type_id, **request.model_dump(exclude_unset=True))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    if not room_type:
        raise HTTPException(status_code=404, detail="Room type not found")
    return _room_type_to_response(room_type)

# ============================================================================
# AVAILABILITY ENDPOINTS
# ============================================================================

@app.get("/api/room-types/{room_type_id}/occupancy", response_model=OccupancyResponse, tags=["Availability"])
async def get_daily_occupancy(
    room_type_id: str,
    start_date: date,
    end_date: date,
    service: OccupancyService = Depends(get_occupancy_service)
):
    """Units committed on each day of [start_date, end_date)"""
    try:
        occupancy = await service.compute_daily_occupancy(room_type_id, start_date, end_date)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return OccupancyResponse(
        room_type_id=room_type_id,
        start_date=start_date,
        end_date=end_date,
        occupancy=occupancy
    )

@app.get("/api/room-types/{room_type_id}/availability-calendar",
         response_model=AvailabilityCalendarResponse, tags=["Availability"])
async def get_availability_calendar(
    room_type_id: str,
    start_date: Optional[date] = None,
    days: Optional[int] = None,
    service: OccupancyService = Depends(get_occupancy_service),
    catalog: CatalogService = Depends(get_catalog_service)
):
    """Free units per day, starting today unless start_date is given"""
    if days is not None and days < 1:
        raise HTTPException(status_code=400, detail="days must be at least 1")
    try:
        calendar = await service.availability_calendar(room_type_id, start=start_date, days=days)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    if calendar is None:
        raise HTTPException(status_code=404, detail="Room type not found or not available")

    room_type = await catalog.get_room_type(room_type_id)
    start = calendar[0].day if calendar else (start_date or clock.today())
    end = calendar[-1].day + timedelta(days=1) if calendar else start
    return AvailabilityCalendarResponse(
        room_type_id=room_type_id,
        room_type_name=room_type.name,
        total_units=room_type.total_units,
        start_date=start,
        end_date=end,
        availability=[DayAvailabilityResponse(**d.model_dump()) for d in calendar]
    )

@app.get("/api/room-types/{room_type_id}/unavailable-dates",
         response_model=UnavailableDatesResponse, tags=["Availability"])
async def get_unavailable_dates(
    room_type_id: str,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    service: OccupancyService = Depends(get_occupancy_service),
    catalog: CatalogService = Depends(get_catalog_service)
):
    """Days on which the room type is fully booked"""
    start = start_date or clock.today()
    end = end_date or start + timedelta(days=service.settings.unavailable_dates_days)
    try:
        dates = await service.unavailable_dates(room_type_id, start=start, end=end)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    if dates is None:
        raise HTTPException(status_code=404, detail="Room type not found or not available")

    room_type = await catalog.get_room_type(room_type_id)
    return UnavailableDatesResponse(
        room_type_id=room_type_id,
        total_units=room_type.total_units,
        start_date=start,
        end_date=end,
        unavailable_dates=dates,
        count=len(dates)
    )

@app.get("/api/room-types/{room_type_id}/check-dates",
         response_model=AvailabilityQuoteResponse, tags=["Availability"])
async def check_dates(
    room_type_id: str,
    check_in: date,
    check_out: date,
    number_of_units: int = 1,
    service: OccupancyService = Depends(get_occupancy_service)
):
    """Preview availability for a stay; does not hold anything"""
    if number_of_units < 1:
        raise HTTPException(status_code=400, detail="number_of_units must be at least 1")
    try:
        quote = await service.check_availability(room_type_id, check_in, check_out, requested_units=number_of_units)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    if quote is None:
        raise HTTPException(status_code=404, detail="Room type not found or not available")
    return AvailabilityQuoteResponse(**quote.model_dump())

# ============================================================================
# RESERVATION ENDPOINTS
# ============================================================================

@app.post("/api/reservations", response_model=ReservationResponse, status_code=201, tags=["Reservations"],
          responses={400: {"model": RejectionResponse}, 404: {"model": RejectionResponse},
                     409: {"model": RejectionResponse}})
async def create_reservation(
    request: CreateReservationRequest,
    controller: AdmissionController = Depends(get_admission_controller),
    current_user: User = Depends(get_current_active_user)
):
    """Book units of a room type for a stay"""
    decision = await controller.evaluate_booking_request(
        room_type_id=request.room_type_id,
        check_in=request.check_in,
        check_out=request.check_out,
        requested_units=request.number_of_units,
        guest_count=request.guests,
        child_count=request.children,
        contact=request.contact(),
        special_requests=request.special_requests,
        created_by=request.created_by
    )
    if isinstance(decision, Rejected):
        return _rejection_to_response(decision)
    return _reservation_to_response(decision.reservation)

@app.get("/api/reservations", response_model=List[ReservationResponse], tags=["Reservations"])
async def get_all_reservations(
    status: Optional[ReservationStatus] = None,
    room_type_id: Optional[str] = None,
    check_in_from: Optional[date] = None,
    check_in_to: Optional[date] = None,
    service: ReservationService = Depends(get_reservation_service),
    current_user: User = Depends(get_current_active_user)
):
    """List reservations, newest first"""
    reservations = await service.list_reservations(
        status=status,
        room_type_id=room_type_id,
        check_in_from=check_in_from,
        check_in_to=check_in_to
    )
    return [_reservation_to_response(r) for r in reservations]

@app.get("/api/reservations/reference/{reference}", response_model=ReservationResponse, tags=["Reservations"])
async def get_reservation_by_reference(
    reference: str,
    service: ReservationService = Depends(get_reservation_service),
    current_user: User = Depends(get_current_active_user)
):
    """Get reservation by booking reference"""
    reservation = await service.get_reservation_by_reference(reference)
    if not reservation:
        raise HTTPException(status_code=404, detail="Reservation not found")
    return _reservation_to_response(reservation)

@app.get("/api/reservations/{reservation_id}", response_model=ReservationResponse, tags=["Reservations"])
async def get_reservation(
    reservation_id: UUID,
    service: ReservationService = Depends(get_reservation_service),
    current_user: User = Depends(get_current_active_user)
):
    """Get reservation by ID"""
    reservation = await service.get_reservation(reservation_id)
    if not reservation:
        raise HTTPException(status_code=404, detail="Reservation not found")
    return _reservation_to_response(reservation)

@app.put("/api/reservations/{reservation_id}/dates", response_model=ReservationResponse, tags=["Reservations"],
         responses={400: {"model": RejectionResponse}, 404: {"model": RejectionResponse},
                    409: {"model": RejectionResponse}})
async def reschedule_reservation(
    reservation_id: UUID,
    request: RescheduleReservationRequest,
    controller: AdmissionController = Depends(get_admission_controller),
    current_user: User = Depends(get_current_active_user)
):
    """Move a reservation to new dates"""
    decision = await controller.reschedule_reservation(
        reservation_id,
        check_in=request.check_in,
        check_out=request.check_out,
        number_of_units=request.number_of_units
    )
    if decision is None:
        raise HTTPException(status_code=404, detail="Reservation not found")
    if isinstance(decision, Rejected):
        return _rejection_to_response(decision)
    return _reservation_to_response(decision.reservation)

@app.post("/api/reservations/{reservation_id}/cancel", response_model=ReservationResponse, tags=["Reservations"])
async def cancel_reservation(
    reservation_id: UUID,
    request: CancelReservationRequest,
    service: ReservationService = Depends(get_reservation_service),
    current_user: User = Depends(get_current_active_user)
):
    """Cancel reservation; its units become bookable again"""
    try:
        reservation = await service.cancel_reservation(
            reservation_id=reservation_id,
            reason=request.reason,
            cancelled_by=current_user.username
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    if not reservation:
        raise HTTPException(status_code=404, detail="Reservation not found")
    return _reservation_to_response(reservation)

@app.post("/api/reservations/{reservation_id}/complete", response_model=ReservationResponse, tags=["Reservations"])
async def complete_reservation(
    reservation_id: UUID,
    service: ReservationService = Depends(get_reservation_service),
    current_user: User = Depends(get_current_active_user)
):
    """Mark a stay as completed"""
    try:
        reservation = await service.complete_reservation(reservation_id)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    if not reservation:
        raise HTTPException(status_code=404, detail="Reservation not found")
    return _reservation_to_response(reservation)

@app.delete("/api/reservations/{reservation_id}", status_code=204, tags=["Reservations"])
async def delete_reservation(
    reservation_id: UUID,
    service: ReservationService = Depends(get_reservation_service),
    current_user: User = Depends(get_current_active_user)
):
    """Delete a reservation record"""
    deleted = await service.delete_reservation(reservation_id)
    if not deleted:
        raise HTTPException(status_code=404, detail="Reservation not found")

# ============================================================================
# HELPER FUNCTIONS
# ============================================================================

def _room_type_to_response(room_type) -> RoomTypeResponse:
    """Convert RoomType entity to RoomTypeResponse"""
    return RoomTypeResponse(
        room_type_id=room_type.room_type_id,
        name=room_type.name,
        description=room_type.description,
        amenities=room_type.amenities,
        nightly_rate=room_type.nightly_rate,
        capacity_per_unit=room_type.capacity_per_unit,
        total_units=room_type.total_units,
        is_bookable=room_type.is_bookable,
        version=room_type.version
    )

def _reservation_to_response(reservation) -> ReservationResponse:
    """Convert Reservation entity to ReservationResponse"""
    return ReservationResponse(
        reservation_id=reservation.reservation_id,
        reference=reservation.reference,
        room_type_id=reservation.room_type_id,
        check_in=reservation.check_in,
        check_out=reservation.check_out,
        nights=reservation.nights(),
        number_of_units=reservation.number_of_units,
        guests=reservation.guest_count.guests,
        children=reservation.guest_count.children,
        guest_name=reservation.contact.name if reservation.contact else None,
        status=reservation.status.value,
        pricing=PricingResponse(**reservation.pricing.model_dump()),
        special_requests=reservation.special_requests,
        cancelled_at=reservation.cancelled_at,
        cancellation_reason=reservation.cancellation_reason,
        created_by=reservation.created_by,
        created_at=reservation.created_at,
        modified_at=reservation.modified_at,
        version=reservation.version
    )

def _rejection_to_response(rejection: Rejected) -> JSONResponse:
    """Render a business rejection with the matching HTTP status"""
    conflict = None
    if rejection.conflict_detail is not None:
        detail = rejection.conflict_detail
        conflict = ConflictResponse(
            reference=detail.reference,
            check_in=detail.check_in,
            check_out=detail.check_out,
            number_of_units=detail.number_of_units,
            status=detail.status
        )
    body = RejectionResponse(code=rejection.code, message=rejection.message, conflict=conflict)
    return JSONResponse(
        status_code=_REJECTION_STATUS.get(rejection.reason, 400),
        content=body.model_dump(mode="json")
    )

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
