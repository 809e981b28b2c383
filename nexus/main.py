import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware

from nexus.config import settings
from nexus.core.exceptions import (
    ConflictException,
    UnauthorizedException,
    NotFoundException,
    ForbiddenException,
    ValidationException,
)
from nexus.core.logging import configure_logging
from nexus.routes import (
    building_routes,
    credit_routes,
    customer_routes,
    loyalty_routes,
    organization_routes,
    payment_routes,
    product_routes,
    receipt_routes,
    report_routes,
    tenant_routes,
)

configure_logging(settings.LOG_LEVEL)
logger = logging.getLogger(__name__)

app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    docs_url="/docs" if settings.DEBUG else None,  # Disable in production
    redoc_url="/redoc" if settings.DEBUG else None,
)

# CORS middleware
cors_origins = settings.cors_origins_list
if cors_origins:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors_origins,
        allow_credentials=settings.CORS_ALLOW_CREDENTIALS,
        allow_methods=["*"],
        allow_headers=["*"],
    )


# Exception handlers
@app.exception_handler(UnauthorizedException)
async def unauthorized_exception_handler(request: Request, exc: UnauthorizedException):
    return JSONResponse(
        status_code=status.HTTP_401_UNAUTHORIZED,
        content={"detail": str(exc)},
        headers={"WWW-Authenticate": "Bearer"},
    )


@app.exception_handler(NotFoundException)
async def not_found_exception_handler(request: Request, exc: NotFoundException):
    return JSONResponse(status_code=status.HTTP_404_NOT_FOUND, content={"detail": str(exc)})


@app.exception_handler(ForbiddenException)
async def forbidden_exception_handler(request: Request, exc: ForbiddenException):
    logger.warning("Forbidden %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=status.HTTP_403_FORBIDDEN, content={"detail": str(exc)})


@app.exception_handler(ValidationException)
async def validation_exception_handler(request: Request, exc: ValidationException):
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"detail": str(exc)})


@app.exception_handler(ConflictException)
async def conflict_exception_handler(request: Request, exc: ConflictException):
    return JSONResponse(status_code=status.HTTP_409_CONFLICT, content={"detail": str(exc)})


@app.get("/health")
async def health_check():
    return {"status": "healthy", "version": settings.APP_VERSION}


@app.get("/")
async def root():
    return {
        "message": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "docs": "/docs" if settings.DEBUG else "Documentation disabled in production",
    }


# Include routers
app.include_router(
    organization_routes.router, prefix="/api/organizations", tags=["Organizations"]
)
app.include_router(product_routes.router, prefix="/api/products", tags=["Inventory"])
app.include_router(building_routes.router, prefix="/api/buildings", tags=["Buildings"])
app.include_router(tenant_routes.router, prefix="/api/tenants", tags=["Tenants"])
app.include_router(payment_routes.router, prefix="/api/payments", tags=["Payments"])
app.include_router(receipt_routes.router, prefix="/api/receipts", tags=["Receipts"])
app.include_router(customer_routes.router, prefix="/api/customers", tags=["Customers"])
app.include_router(credit_routes.router, prefix="/api/credit", tags=["Credit"])
app.include_router(loyalty_routes.router, prefix="/api/loyalty", tags=["Loyalty"])
app.include_router(report_routes.router, prefix="/api/reports", tags=["Reports"])
