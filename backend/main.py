import logging
import time
import uuid
from datetime import datetime, timezone
from typing import Optional

from fastapi import FastAPI, Depends, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import HTMLResponse, JSONResponse
from sqlalchemy import text
from sqlalchemy.orm import Session
from starlette.exceptions import HTTPException as StarletteHTTPException

import bookings
import invoices
import sharing
from config import settings, configure_logging
from database import engine, SessionLocal, Base
from errors import BookingError
from schemas import BookingCreate, BookingUpdate, RatingUpdate, ShareRequest, error_details
from services import catalog

VERSION = "1.0.0"

configure_logging()
logger = logging.getLogger(__name__)

Base.metadata.create_all(engine)

# generic codes for failures nothing else handled, keyed by endpoint name
UNEXPECTED_ERRORS = {
    "create_booking": ("Failed to create booking", "CREATE_BOOKING_ERROR"),
    "list_bookings": ("Failed to fetch bookings", "FETCH_BOOKINGS_ERROR"),
    "get_booking": ("Failed to fetch booking", "FETCH_BOOKING_ERROR"),
    "update_booking": ("Failed to update booking", "UPDATE_BOOKING_ERROR"),
    "delete_booking": ("Failed to delete booking", "DELETE_BOOKING_ERROR"),
    "search_bookings": ("Search failed", "SEARCH_ERROR"),
    "filter_bookings": ("Filter operation failed", "FILTER_ERROR"),
    "rate_booking": ("Failed to update rating", "UPDATE_RATING_ERROR"),
    "booking_stats": ("Failed to fetch booking statistics", "STATS_ERROR"),
    "booking_invoice": ("Failed to generate invoice", "INVOICE_ERROR"),
}

# ================== APP ==================
app = FastAPI(title="Car Wash Booking API", version=VERSION)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@app.middleware("http")
async def log_requests(request: Request, call_next):
    request_id = request.headers.get("x-request-id") or uuid.uuid4().hex
    start = time.perf_counter()
    response = await call_next(request)
    elapsed_ms = (time.perf_counter() - start) * 1000
    response.headers["X-Response-Time"] = f"{elapsed_ms:.1f}ms"
    response.headers["X-Request-ID"] = request_id
    if request.url.path not in ("/", "/health"):
        logger.info("%s %s %s %.1fms [%s]", request.method, request.url.path,
                    response.status_code, elapsed_ms, request_id)
    return response


# ================== ERRORS ==================
@app.exception_handler(BookingError)
async def booking_error_handler(request: Request, exc: BookingError):
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(status_code=400, content={
        "success": False,
        "error": {
            "message": "Validation failed",
            "code": "VALIDATION_ERROR",
            "details": error_details(exc.errors()),
        },
    })


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    if exc.status_code == 404:
        message, code = f"Route {request.url.path} not found", "ROUTE_NOT_FOUND"
    elif exc.status_code == 405:
        message, code = f"Method {request.method} not allowed on {request.url.path}", "METHOD_NOT_ALLOWED"
    else:
        message, code = str(exc.detail), "HTTP_ERROR"
    return JSONResponse(status_code=exc.status_code, content={
        "success": False,
        "error": {"message": message, "code": code},
    })


@app.exception_handler(Exception)
async def unexpected_error_handler(request: Request, exc: Exception):
    route = request.scope.get("route")
    message, code = UNEXPECTED_ERRORS.get(getattr(route, "name", None),
                                          ("Internal server error", "INTERNAL_SERVER_ERROR"))
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={
        "success": False,
        "error": {"message": message, "code": code},
    })


# ================== INFO ==================
@app.get("/")
def index():
    return {
        "message": "Car Wash Booking API Server is running!",
        "version": VERSION,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "environment": settings.ENVIRONMENT,
    }


@app.get("/health")
def health(db: Session = Depends(get_db)):
    try:
        db.execute(text("SELECT 1"))
        database = "connected"
    except Exception:
        logger.exception("Database health check failed")
        database = "unavailable"
    return {
        "status": "OK",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "database": database,
    }


@app.get("/api/services")
def get_services():
    return {"success": True, "data": catalog()}


# ================== BOOKINGS ==================
@app.post("/api/bookings", status_code=201)
def create_booking(payload: BookingCreate, db: Session = Depends(get_db)):
    data = bookings.create_booking(db, payload)
    return {"success": True, "data": data, "message": "Booking created successfully"}


@app.get("/api/bookings")
def list_bookings(request: Request, db: Session = Depends(get_db)):
    result = bookings.list_bookings(db, request.query_params)
    return {"success": True, **result}


@app.get("/api/bookings/stats")
def booking_stats(db: Session = Depends(get_db)):
    return {"success": True, "data": bookings.booking_stats(db)}


@app.get("/api/bookings/search")
def search_bookings(request: Request, db: Session = Depends(get_db)):
    result = bookings.search_bookings(db, request.query_params)
    return {"success": True, **result}


@app.get("/api/bookings/filter")
def filter_bookings(request: Request, db: Session = Depends(get_db)):
    result = bookings.filter_bookings(db, request.query_params)
    return {"success": True, **result}


@app.get("/api/bookings/shared/{booking_id}")
def shared_booking(booking_id: str, token: str = "", db: Session = Depends(get_db)):
    booking_id = bookings.validate_booking_id(booking_id)
    sharing.verify_share_token(booking_id, token)
    return {"success": True, "data": bookings.get_booking(db, booking_id)}


@app.get("/api/bookings/{booking_id}")
def get_booking(booking_id: str, db: Session = Depends(get_db)):
    return {"success": True, "data": bookings.get_booking(db, booking_id)}


@app.put("/api/bookings/{booking_id}")
def update_booking(booking_id: str, payload: BookingUpdate, db: Session = Depends(get_db)):
    data = bookings.update_booking(db, booking_id, payload)
    return {"success": True, "data": data, "message": "Booking updated successfully"}


@app.delete("/api/bookings/{booking_id}")
def delete_booking(booking_id: str, db: Session = Depends(get_db)):
    data = bookings.delete_booking(db, booking_id)
    return {"success": True, "message": "Booking deleted successfully", "data": data}


@app.patch("/api/bookings/{booking_id}/rating")
def rate_booking(booking_id: str, payload: Optional[RatingUpdate] = None, db: Session = Depends(get_db)):
    rating = payload.rating if payload else None
    data = bookings.rate_booking(db, booking_id, rating)
    return {"success": True, "data": data, "message": "Rating updated successfully"}


# ================== SHARING ==================
@app.get("/api/bookings/{booking_id}/share")
def booking_share_links(booking_id: str, db: Session = Depends(get_db)):
    booking = bookings.get_booking(db, booking_id)
    return {"success": True, "data": sharing.share_links(booking)}


@app.post("/api/bookings/{booking_id}/share")
async def share_booking(booking_id: str, payload: ShareRequest, db: Session = Depends(get_db)):
    booking = bookings.get_booking(db, booking_id)
    await sharing.deliver(booking, payload.channel, payload.recipient)
    return {
        "success": True,
        "message": f"Booking confirmation sent via {payload.channel}",
        "data": {"id": booking["id"], "channel": payload.channel, "shareUrl": sharing.share_url(booking["id"])},
    }


@app.get("/api/bookings/{booking_id}/invoice", response_class=HTMLResponse)
def booking_invoice(booking_id: str, db: Session = Depends(get_db)):
    booking = bookings.get_booking(db, booking_id)
    return invoices.render_invoice(booking)


if __name__ == "__main__":
    import os
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=int(os.getenv("PORT", 8000)))
