"""
Health check API route
"""

from datetime import datetime
from fastapi import APIRouter, HTTPException, Depends
from database.connection import get_database

router = APIRouter()

@router.get("/health")
async def health_check(database=Depends(get_database)):
    """Health check - reports unhealthy only when the document store is unreachable"""
    try:
        await database.ping()
    except Exception as e:
        raise HTTPException(status_code=503, detail=f"Health check failed: {str(e)}")

    return {
        "status": "healthy",
        "timestamp": datetime.utcnow().isoformat(),
        "database": "connected"
    }
