"""Application configuration."""

import os
from pathlib import Path

from dotenv import load_dotenv

# Load .env so SUPABASE_* and storage settings are available
load_dotenv()

# Storage: "local" or "supabase" ("remote" is accepted as an alias)
STORAGE_BACKEND = os.getenv("STORAGE_BACKEND", "local")

# Local storage root (used when STORAGE_BACKEND=local). Created on first write.
LOCAL_STORAGE_PATH = Path(os.getenv("LOCAL_STORAGE_PATH", "uploads")).resolve()

# Public prefix for local files, e.g. /uploads or http://localhost:8000/uploads
LOCAL_FILES_BASE_URL = os.getenv("LOCAL_FILES_BASE_URL", "/uploads").rstrip("/")

# Supabase (used when STORAGE_BACKEND=supabase)
SUPABASE_URL = os.getenv("SUPABASE_URL", "").rstrip("/")
SUPABASE_SERVICE_ROLE_KEY = os.getenv("SUPABASE_SERVICE_ROLE_KEY", "")
SUPABASE_BUCKET = os.getenv("SUPABASE_UPLOAD_BUCKET", "uploads")
# Defaults to {SUPABASE_URL}/storage/v1/object/public when empty
SUPABASE_PUBLIC_URL = os.getenv("SUPABASE_PUBLIC_URL", "").rstrip("/")
SUPABASE_CACHE_CONTROL = os.getenv("SUPABASE_CACHE_CONTROL", "3600")
SUPABASE_BUCKET_SIZE_LIMIT = int(os.getenv("SUPABASE_BUCKET_SIZE_LIMIT", 100 * 1024 * 1024))  # 100 MB

# Create the Supabase bucket on startup if it is missing
STORAGE_AUTO_PROVISION = os.getenv("STORAGE_AUTO_PROVISION", "false").lower() in ("true", "1", "yes")

# Image processing
IMAGE_MAX_WIDTH = int(os.getenv("IMAGE_MAX_WIDTH", "400"))
IMAGE_MAX_HEIGHT = int(os.getenv("IMAGE_MAX_HEIGHT", "400"))
IMAGE_QUALITY = int(os.getenv("IMAGE_QUALITY", "80"))
IMAGE_OUTPUT_FORMAT = os.getenv("IMAGE_OUTPUT_FORMAT", "webp").lower()

# File size limits (bytes)
MAX_FILE_SIZE_IMAGE = int(os.getenv("MAX_FILE_SIZE_IMAGE", 5 * 1024 * 1024))  # 5 MB
MAX_FILE_SIZE_VIDEO = int(os.getenv("MAX_FILE_SIZE_VIDEO", 100 * 1024 * 1024))  # 100 MB

# Allowed upload types
ALLOWED_IMAGE_MIME_TYPES = ("image/jpeg", "image/png", "image/webp", "image/gif")
ALLOWED_VIDEO_MIME_TYPES = ("video/mp4", "video/webm", "video/quicktime", "video/x-msvideo")

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
