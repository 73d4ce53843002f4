import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from farmconnect.config import settings
from farmconnect.database import create_db_and_tables
from farmconnect.exceptions import MarketplaceError
from farmconnect.routes import (
    cart,
    messages,
    notifications,
    orders,
    realtime,
)

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Run DB creation ONLY in local; other environments migrate with alembic
    if settings.ENV == "local":
        create_db_and_tables()
    yield

app = FastAPI(title="FarmConnect Marketplace API", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(MarketplaceError)
async def marketplace_error_handler(request: Request, exc: MarketplaceError):
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    # bad input shape is a plain 400 with the first problem spelled out
    errors = exc.errors()
    first = errors[0] if errors else {}
    message = first.get("msg", "Invalid input")
    field = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    if field:
        message = f"{field}: {message}"
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"detail": message})


app.include_router(cart.router, prefix="/cart", tags=["Cart"])
app.include_router(orders.router, prefix="/orders", tags=["Orders"])
app.include_router(notifications.router, prefix="/notifications", tags=["Notifications"])
app.include_router(messages.router, prefix="/messages", tags=["Messages"])
app.include_router(realtime.router, tags=["Realtime"])


@app.get("/")
def root():
    return {
        "cart": ["/cart", "/cart/{item_id}"],
        "orders": [
            "/orders", "/orders/farmer", "/orders/{order_id}",
            "/orders/{sub_order_id}/status", "/orders/{order_id}/cancel",
        ],
        "notifications": ["/notifications", "/notifications/{notification_id}/read"],
        "messages": ["/messages", "/messages/{user_id}", "/messages/{message_id}/read"],
        "realtime": ["/ws?token=<access token>"],
    }
