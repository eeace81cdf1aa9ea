from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from core.config import allowed_origins, logger  # type: ignore

# Routers
from routers import brand, presign  # type: ignore

app = FastAPI(title="LDAR Pet Image Branding")

# ---- CORS setup ----
# Uploads come straight from a static site, so the default is any origin
app.add_middleware(
    CORSMiddleware,
    allow_origins=allowed_origins(),
    allow_credentials=False,
    allow_methods=["GET", "PUT", "POST", "DELETE", "PATCH", "OPTIONS"],
    allow_headers=["*"],
)


# --- Security headers ---
@app.middleware("http")
async def add_security_headers(request, call_next):
    response = await call_next(request)
    response.headers.setdefault("X-Content-Type-Options", "nosniff")
    response.headers.setdefault("Referrer-Policy", "strict-origin-when-cross-origin")
    return response


app.include_router(presign.router)
app.include_router(brand.router)


@app.get("/healthz")
async def healthz():
    return {"status": "ok"}


logger.info("LDAR branding service ready")
