# main.py
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from ai2sql.routes import (
    admin_routes,
    chat_routes,
    connection_routes,
    example_routes,
    note_routes,
    project_routes,
    settings_routes,
)
from ai2sql.auth import auth_routes
from ai2sql.config import CORS_ORIGINS, LOG_LEVEL
from ai2sql.database.db import Base, engine
from ai2sql.database import models  # noqa: F401  registers tables on Base.metadata
import logging

# Configure logging
logging.basicConfig(
    level=LOG_LEVEL,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)

app = FastAPI(title="AI2SQL API")

# Create database tables on startup
@app.on_event("startup")
def startup():
    """Ensures all database tables are created when the application starts."""
    Base.metadata.create_all(bind=engine)
    logging.info("Database tables created/checked.")

# CORS Configuration
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(auth_routes.router, prefix="/api/auth", tags=["auth"])
app.include_router(project_routes.router, prefix="/api/projects", tags=["projects"])
app.include_router(chat_routes.router, prefix="/api", tags=["chats"])
app.include_router(note_routes.router, prefix="/api", tags=["notes"])
app.include_router(example_routes.router, prefix="/api", tags=["examples"])
app.include_router(connection_routes.router, prefix="/api", tags=["connections"])
app.include_router(settings_routes.router, prefix="/api/settings", tags=["settings"])
app.include_router(admin_routes.router, prefix="/api/admin", tags=["admin"])

@app.get("/")
async def root():
    """Root endpoint for the API."""
    return {"message": "AI2SQL API is running"}
