"""Complaint Service Configuration."""
import os
from pathlib import Path
from dotenv import load_dotenv

# Load .env file from service directory
service_dir = Path(__file__).parent
project_root = service_dir.parent.parent
env_file = service_dir / ".env"
if env_file.exists():
    load_dotenv(env_file)

# Service Configuration
PORT = int(os.getenv("PORT", "5000"))
SERVICE_NAME = os.getenv("SERVICE_NAME", "complaint")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOG_DIR = os.getenv("LOG_DIR", "logs")

# Storage: one SQLite file and one uploads directory next to the service
DATABASE_PATH = Path(os.getenv("DATABASE_PATH", str(service_dir / "database.sqlite")))
UPLOAD_DIR = Path(os.getenv("UPLOAD_DIR", str(service_dir / "uploads")))

# Frontend single-page app served for any unmatched GET
FRONTEND_DIR = Path(os.getenv("FRONTEND_DIR", str(project_root / "frontend")))
FRONTEND_INDEX = os.getenv("FRONTEND_INDEX", "civicfinal.html")

CORS_ORIGINS = [
    origin.strip()
    for origin in os.getenv(
        "CORS_ORIGINS",
        "http://127.0.0.1:5500,http://127.0.0.1:5501,http://localhost:3000",
    ).split(",")
    if origin.strip()
]
