# upleer/routes/integrations.py
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from upleer.core.auth import require_admin
from upleer.dependencies import get_db
from upleer.schemas.integration import (
    ApiLogRead,
    EndpointCreate,
    EndpointRead,
    EndpointTestRequest,
    IntegrationCreate,
    IntegrationRead,
    IntegrationUpdate,
)
from upleer.services.endpoint_tester import EndpointTester
from upleer.services.integration_service import IntegrationService

router = APIRouter(prefix="/api/integrations", tags=["integrations"], dependencies=[Depends(require_admin)])


def get_endpoint_tester(db: AsyncSession = Depends(get_db)) -> EndpointTester:
    return EndpointTester(db)


@router.get("", response_model=List[IntegrationRead])
async def list_integrations(db: AsyncSession = Depends(get_db)):
    return await IntegrationService(db).list_integrations()


@router.post("", response_model=IntegrationRead, status_code=201)
async def create_integration(data: IntegrationCreate, db: AsyncSession = Depends(get_db)):
    return await IntegrationService(db).create_integration(data)


@router.get("/logs", response_model=List[ApiLogRead])
async def list_logs(
    integration_id: Optional[int] = None,
    limit: int = Query(50, ge=1, le=500),
    db: AsyncSession = Depends(get_db),
):
    return await IntegrationService(db).list_logs(integration_id=integration_id, limit=limit)


@router.get("/{integration_id}", response_model=IntegrationRead)
async def get_integration(integration_id: int, db: AsyncSession = Depends(get_db)):
    return await IntegrationService(db).get_integration(integration_id)


@router.patch("/{integration_id}", response_model=IntegrationRead)
async def update_integration(integration_id: int, data: IntegrationUpdate, db: AsyncSession = Depends(get_db)):
    return await IntegrationService(db).update_integration(integration_id, data.model_dump(exclude_unset=True))


@router.delete("/{integration_id}", status_code=204)
async def delete_integration(integration_id: int, db: AsyncSession = Depends(get_db)):
    await IntegrationService(db).delete_integration(integration_id)


@router.get("/{integration_id}/endpoints", response_model=List[EndpointRead])
async def list_endpoints(integration_id: int, db: AsyncSession = Depends(get_db)):
    return await IntegrationService(db).list_endpoints(integration_id)


@router.post("/{integration_id}/endpoints", response_model=EndpointRead, status_code=201)
async def add_endpoint(integration_id: int, data: EndpointCreate, db: AsyncSession = Depends(get_db)):
    return await IntegrationService(db).add_endpoint(integration_id, data)


@router.delete("/{integration_id}/endpoints/{endpoint_id}", status_code=204)
async def delete_endpoint(integration_id: int, endpoint_id: int, db: AsyncSession = Depends(get_db)):
    await IntegrationService(db).delete_endpoint(integration_id, endpoint_id)


@router.post("/{integration_id}/test")
async def test_endpoint(
    integration_id: int,
    request: EndpointTestRequest,
    tester: EndpointTester = Depends(get_endpoint_tester),
):
    """Send one request through the integration and log it."""
    return await tester.run(integration_id, request)
