# main.py: backend entrypoint

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from brewja_backend.app.config import validate_manifest
from brewja_backend.app.routers import bottles, dash, history, inventory, kegs, recipes, tanks
from brewja_backend.app.services.production.errors import (
    CapacityExceededError, DuplicateKegIdError, InsufficientStockError, KegNotAvailableError,
    NotFoundError, ProductionError, TankNotEmptyError, ValidationError,
)


app = FastAPI(title="Brewja API")

# --- CORS for Vite dev -------------------------------------------------------
app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:5173", "http://127.0.0.1:5173"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# --- Rejected transitions -> HTTP --------------------------------------------
# most specific first; TankNotEmpty is a ValidationError but means "busy"
_STATUS_BY_ERROR = (
    (NotFoundError, 404),
    (KegNotAvailableError, 409),
    (DuplicateKegIdError, 409),
    (TankNotEmptyError, 409),
    (CapacityExceededError, 422),
    (InsufficientStockError, 422),
    (ValidationError, 422),
)

def status_for(exc: ProductionError) -> int:
    for cls, code in _STATUS_BY_ERROR:
        if isinstance(exc, cls):
            return code
    return 400

@app.exception_handler(ProductionError)
async def production_error_handler(request: Request, exc: ProductionError):
    return JSONResponse(status_code=status_for(exc), content={"ok": False, **exc.to_dict()})

# --- Routers under /api ------------------------------------------------------
for _router in (tanks.router, kegs.router, bottles.router, inventory.router,
                recipes.router, history.router, dash.router):
    app.include_router(_router, prefix="/api")

# --- Health ------------------------------------------------------------------
@app.get("/health")
async def health():
    return {"ok": True}

@app.get("/api/health")
async def api_health():
    # mirror the non-prefixed /health so the FE's /api/health succeeds
    return {"ok": True}

@app.get("/api/manifest")
async def manifest():
    return validate_manifest()
