from fastapi import APIRouter, Depends
from sqlalchemy import inspect, text
from sqlalchemy.ext.asyncio import AsyncSession

from upleer.dependencies import get_db

router = APIRouter(tags=["health"])

@router.get("/health")
async def health_check():
    """Basic health check"""
    return {"status": "healthy", "service": "Upleer"}

@router.get("/health/db")
async def database_health(db: AsyncSession = Depends(get_db)):
    """Check database connectivity and tables"""
    try:
        await db.execute(text("SELECT 1"))
        connection = await db.connection()
        tables = await connection.run_sync(lambda sync_conn: sorted(inspect(sync_conn).get_table_names()))

        return {
            "status": "healthy",
            "database": "connected",
            "tables_count": len(tables),
            "tables": tables
        }
    except Exception as e:
        return {
            "status": "unhealthy",
            "database": "error",
            "error": str(e)
        }
