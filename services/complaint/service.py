"""Complaint Service - HTTP API for civic complaint intake."""
import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent.parent
sys.path.insert(0, str(project_root))

from contextlib import asynccontextmanager
from fastapi import APIRouter, Depends, FastAPI, File, Form, Request, UploadFile
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse, JSONResponse, PlainTextResponse
from fastapi.staticfiles import StaticFiles
from pydantic import BaseModel
from typing import List, Optional
import time

from civicfix.errors import StorageError
from civicfix.services.complaint import ComplaintStore, MAX_IMAGES
from civicfix.services.uploads import UploadStorage
from civicfix.utils.logger import ServiceLogger
from civicfix.utils.metrics import MetricsCollector
from services.complaint import config

# Initialize logger and metrics
logger = ServiceLogger(config.SERVICE_NAME, level=config.LOG_LEVEL, log_dir=config.LOG_DIR)
metrics = MetricsCollector(config.SERVICE_NAME)

router = APIRouter()


class Envelope(BaseModel):
    success: bool
    message: str


class ComplaintResponse(BaseModel):
    id: int
    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    category: Optional[str] = None
    description: Optional[str] = None
    location: Optional[str] = None
    status: Optional[str] = None
    imagePaths: Optional[str] = None
    createdAt: Optional[str] = None


class StatusUpdateRequest(BaseModel):
    status: Optional[str] = None


def get_store(request: Request) -> ComplaintStore:
    return request.app.state.store


def get_uploads(request: Request) -> UploadStorage:
    return request.app.state.uploads


def failure(message: str, status_code: int = 500) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"success": False, "message": message})


def elapsed_ms(start_time: float) -> float:
    return (time.time() - start_time) * 1000


@router.get("/", response_class=PlainTextResponse)
def root():
    return "CivicFix backend running"


@router.post("/api/complaints", response_model=Envelope)
def create_complaint(
    name: Optional[str] = Form(None),
    email: Optional[str] = Form(None),
    phone: Optional[str] = Form(None),
    category: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    location: Optional[str] = Form(None),
    images: Optional[List[UploadFile]] = File(None),
    store: ComplaintStore = Depends(get_store),
    uploads: UploadStorage = Depends(get_uploads),
):
    start_time = time.time()
    # Empty file inputs arrive as parts without a filename.
    files = [image for image in images or [] if image.filename]
    if len(files) > MAX_IMAGES:
        logger.warning(f"Rejected complaint with {len(files)} images", images=len(files))
        metrics.increment("errors_total")
        return failure(f"Too many images. A complaint accepts at most {MAX_IMAGES}.", status_code=400)

    logger.info(f"Saving complaint in category '{category}' with {len(files)} image(s)",
                category=category, images=len(files))
    try:
        image_paths = [uploads.save(image.filename, image.file) for image in files]
        complaint_id = store.insert(
            {
                "name": name,
                "email": email,
                "phone": phone,
                "category": category,
                "description": description,
                "location": location,
            },
            image_paths,
        )
    except StorageError as exc:
        logger.error(f"Error saving complaint: {exc}")
        metrics.increment("errors_total")
        return failure("Error saving complaint.")

    metrics.increment("complaints_created")
    metrics.increment("images_uploaded", len(image_paths))
    metrics.timing("complaint_create_duration", elapsed_ms(start_time))
    logger.info(f"Complaint #{complaint_id} saved", complaint_id=complaint_id)
    return Envelope(success=True, message="Complaint saved successfully!")


@router.get("/api/complaints", response_model=List[ComplaintResponse])
def list_complaints(store: ComplaintStore = Depends(get_store)):
    start_time = time.time()
    try:
        complaints = store.list_all()
    except StorageError as exc:
        logger.error(f"Error fetching complaints: {exc}")
        metrics.increment("errors_total")
        return failure("Error fetching complaints.")

    metrics.increment("complaints_listed")
    metrics.gauge("complaints_total", len(complaints))
    metrics.timing("complaint_list_duration", elapsed_ms(start_time))
    logger.debug(f"Listed {len(complaints)} complaints", count=len(complaints))
    return [ComplaintResponse(**c.to_dict()) for c in complaints]


@router.put("/api/complaints/{complaint_id}", response_model=Envelope)
def update_status(complaint_id: int, req: StatusUpdateRequest, store: ComplaintStore = Depends(get_store)):
    start_time = time.time()
    try:
        store.update_status(complaint_id, req.status)
    except StorageError as exc:
        logger.error(f"Error updating status of complaint #{complaint_id}: {exc}")
        metrics.increment("errors_total")
        return failure("Error updating status.")

    metrics.increment("status_updates")
    metrics.timing("status_update_duration", elapsed_ms(start_time))
    logger.info(f"Complaint #{complaint_id} status set to '{req.status}'",
                complaint_id=complaint_id, status=req.status)
    return Envelope(success=True, message="Status updated successfully!")


@router.get("/health")
def health():
    return {"status": "ok", "service": config.SERVICE_NAME}


@router.get("/logs")
def get_logs(limit: int = 100):
    """Get recent logs from this service."""
    return logger.get_recent_logs(limit=limit)


@router.get("/metrics")
def get_metrics(period: Optional[int] = None):
    """Get metrics from this service."""
    return metrics.get_all_metrics(time_period_minutes=period)


# Registered last so every API route above wins over it.
@router.get("/{full_path:path}", include_in_schema=False)
def serve_frontend(full_path: str, request: Request):
    root_dir = Path(request.app.state.frontend_dir).resolve()
    if full_path:
        candidate = (root_dir / full_path).resolve()
        if candidate.is_relative_to(root_dir) and candidate.is_file():
            return FileResponse(candidate)

    index = root_dir / request.app.state.frontend_index
    if index.is_file():
        return FileResponse(index)
    return PlainTextResponse("Not Found", status_code=404)


def create_app(
    database_path=config.DATABASE_PATH,
    upload_dir=config.UPLOAD_DIR,
    frontend_dir=config.FRONTEND_DIR,
    frontend_index: str = config.FRONTEND_INDEX,
    cors_origins: Optional[List[str]] = None,
) -> FastAPI:
    """Build the complaint API around its own store and upload directory.

    The store is opened and the uploads directory created in the lifespan
    startup phase, so no request is served before storage is ready.
    """
    store = ComplaintStore(database_path)
    uploads = UploadStorage(upload_dir)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        uploads.ensure()
        store.open()
        app.state.store = store
        app.state.uploads = uploads
        logger.info(f"Complaint store ready at {store.database_path}")
        yield
        store.close()
        logger.info("Complaint store closed")

    app = FastAPI(title="Complaint Service", lifespan=lifespan)
    app.state.frontend_dir = Path(frontend_dir)
    app.state.frontend_index = frontend_index

    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors_origins if cors_origins is not None else config.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE"],
        allow_headers=["*"],
    )
    app.mount("/uploads", StaticFiles(directory=upload_dir, check_dir=False), name="uploads")
    app.include_router(router)
    return app


app = create_app()
logger.info(f"Complaint service configured on port {config.PORT}")


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=config.PORT)
