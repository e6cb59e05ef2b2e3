"""
FastAPI Main Application

HTTP surface for the range vault: share operations, upkeep trigger,
protocol fee collection and simulation controls.
"""
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from datetime import datetime

from range_vault.exceptions import VaultError

from app.config import settings
from app.api.v1 import health, vault, upkeep, admin, sim
from app.core.vault_service import error_status_code, get_service

# Create FastAPI app
app = FastAPI(
    title=settings.API_TITLE,
    description=settings.API_DESCRIPTION,
    version=settings.API_VERSION,
    docs_url="/docs",
    redoc_url="/redoc"
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Include routers
app.include_router(vault.router, prefix="/api/v1", tags=["Vault"])
app.include_router(upkeep.router, prefix="/api/v1", tags=["Upkeep"])
app.include_router(admin.router, prefix="/api/v1", tags=["Protocol Fees"])
app.include_router(sim.router, prefix="/api/v1", tags=["Simulation"])
app.include_router(health.router, prefix="/api/v1", tags=["Health"])


@app.exception_handler(VaultError)
async def vault_error_handler(request: Request, exc: VaultError):
    """Map vault error kinds to HTTP status codes"""
    print(f"[Vault] {request.method} {request.url.path} failed: {exc.kind}: {exc.message}")
    return JSONResponse(status_code=error_status_code(exc), content=exc.to_dict())


@app.exception_handler(ValueError)
async def collaborator_error_handler(request: Request, exc: ValueError):
    """Collaborator rejections (balances, allowances, pool checks)"""
    print(f"[Vault] {request.method} {request.url.path} rejected: {exc}")
    return JSONResponse(status_code=400, content={"error": "collaborator_rejected", "detail": str(exc)})


@app.get("/")
async def root():
    """Root endpoint with API information"""
    return {
        "name": settings.API_TITLE,
        "version": settings.API_VERSION,
        "description": settings.API_DESCRIPTION,
        "docs": "/docs",
        "health": "/api/v1/health",
        "timestamp": datetime.utcnow().isoformat()
    }


@app.on_event("startup")
async def startup_event():
    """Actions to perform on application startup"""
    service = get_service()
    print(f"🚀 Starting {settings.API_TITLE} v{settings.API_VERSION}")
    print(f"📊 Vault {service.vault.address} range {service.vault.position}")
    print(f"🔑 Graph API configured: {'✓' if settings.GRAPH_API_KEY else '✗'}")


@app.on_event("shutdown")
async def shutdown_event():
    """Actions to perform on application shutdown"""
    print("👋 Shutting down Range Vault API")


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "app.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG
    )
