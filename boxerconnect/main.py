from contextlib import asynccontextmanager
import logging
from typing import Annotated
from urllib.parse import urlparse

from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse, PlainTextResponse

from boxerconnect.config import LOCAL_FILES_BASE_URL, LOG_LEVEL, STORAGE_AUTO_PROVISION
from boxerconnect.routers import media
from boxerconnect.storage import InvalidPath, LocalStorage, StorageBackend, SupabaseStorage, get_storage

# Configure logging
logging.basicConfig(
    level=LOG_LEVEL,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Provision the Supabase bucket on startup when asked to."""
    storage = get_storage()
    if STORAGE_AUTO_PROVISION and isinstance(storage, SupabaseStorage):
        await storage.create_bucket()
    logger.info("Storage backend: %s", type(storage).__name__)
    yield


app = FastAPI(
    title="BoxerConnect Media API",
    description="Photo and video storage for boxers, coaches and clubs",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:5173", "http://127.0.0.1:5173"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(media.router)


@app.get("/")
async def root():
    return {"message": "BoxerConnect Media API", "version": "0.1.0"}


# Serve local uploads when the default backend is local (url is LOCAL_FILES_BASE_URL/key)
LOCAL_FILES_ROUTE = urlparse(LOCAL_FILES_BASE_URL).path.rstrip("/") or "/uploads"

if isinstance(get_storage(), LocalStorage):

    @app.get(LOCAL_FILES_ROUTE + "/{path:path}")
    async def serve_upload(
        path: str,
        storage: Annotated[StorageBackend, Depends(get_storage)],
    ):
        """Serve files from the local storage root. Path must resolve inside the root."""
        if not isinstance(storage, LocalStorage):
            return PlainTextResponse("Not Found", status_code=404)
        try:
            full_path = storage.resolve_path(path)
        except InvalidPath:
            return PlainTextResponse("Forbidden", status_code=403)
        if not full_path.is_file():
            return PlainTextResponse("Not Found", status_code=404)
        return FileResponse(full_path)
