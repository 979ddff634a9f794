import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from receiptflow.config import settings

logging.basicConfig(level=logging.DEBUG if settings.DEBUG else logging.INFO)

app = FastAPI(
    title="ReceiptFlow API",
    description="Receipt and statement text to transaction suggestions",
    version="0.1.0"
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

@app.get("/")
async def root():
    return {
        "message": "ReceiptFlow API",
        "version": "0.1.0",
        "status": "running"
    }

@app.get("/health")
async def health_check():
    return {"status": "healthy"}

# Import routers
from receiptflow.routers import receipts

# Include routers
app.include_router(receipts.router)
