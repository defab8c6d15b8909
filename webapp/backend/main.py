"""FastAPI application for the surgical case list."""
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from surgery_scheduler.config import get_settings
from surgery_scheduler.database import get_engine
from surgery_scheduler.errors import CaseNotFoundError, InvalidRoomError, ImportFormatError, StoreError
from surgery_scheduler.logging import init_logging
from routers import cases, calendar, rooms, professors, imports, export

settings = get_settings()
init_logging(settings.log_level)

# Create tables
get_engine()

app = FastAPI(
    title=settings.app_name,
    description="Surgical case calendar, room assignment and weekly list import",
    version="1.0.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origin_list,
    allow_credentials=False,  # Must be False when allow_origins is "*"
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(CaseNotFoundError)
def _not_found(request: Request, exc: CaseNotFoundError):
    return JSONResponse(status_code=404, content={"detail": str(exc)})


@app.exception_handler(InvalidRoomError)
@app.exception_handler(ImportFormatError)
def _bad_request(request: Request, exc: Exception):
    return JSONResponse(status_code=400, content={"detail": str(exc)})


@app.exception_handler(StoreError)
def _store_failed(request: Request, exc: StoreError):
    return JSONResponse(status_code=503, content={"detail": f"Store write failed: {exc}"})


app.include_router(cases.router, prefix="/api/cases", tags=["cases"])
app.include_router(calendar.router, prefix="/api/calendar", tags=["calendar"])
app.include_router(rooms.router, prefix="/api/rooms", tags=["rooms"])
app.include_router(professors.router, prefix="/api/professors", tags=["professors"])
app.include_router(imports.router, prefix="/api/import", tags=["import"])
app.include_router(export.router, prefix="/api/export", tags=["export"])


@app.get("/")
def root():
    return {"message": f"{settings.app_name} API", "docs": "/docs"}
