import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from openmd.api import auth, notes, shares, views
from openmd.errors import StoreFailure

logger = logging.getLogger(__name__)

app = FastAPI(title="OpenMD")

# agents call the API from anywhere
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(StoreFailure)
async def store_failure_handler(request: Request, exc: StoreFailure):
    logger.error("store failure on %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=500, content={"detail": "Internal server error"})


@app.get("/health")
def health():
    return {"ok": True}


app.include_router(auth.router)
app.include_router(notes.router)
app.include_router(shares.router)
app.include_router(views.router)
