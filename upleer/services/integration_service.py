# upleer/services/integration_service.py
import logging
from typing import Any, Dict, List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from upleer.core.exceptions import IntegrationNotFoundError
from upleer.models.api_integration import ApiEndpoint, ApiIntegration, ApiLog
from upleer.schemas.integration import EndpointCreate, IntegrationCreate

logger = logging.getLogger(__name__)


class IntegrationService:
    """CRUD for outbound API integrations, their saved endpoints and call logs."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def list_integrations(self) -> List[ApiIntegration]:
        result = await self.db.execute(select(ApiIntegration).order_by(ApiIntegration.name))
        return result.scalars().all()

    async def get_integration(self, integration_id: int) -> ApiIntegration:
        integration = await self.db.get(ApiIntegration, integration_id)
        if not integration:
            raise IntegrationNotFoundError(f"Integration {integration_id} not found")
        return integration

    async def create_integration(self, data: IntegrationCreate) -> ApiIntegration:
        integration = ApiIntegration(**data.model_dump(mode="json"))
        self.db.add(integration)
        await self.db.commit()
        await self.db.refresh(integration)
        logger.info("Created integration %s (%s)", integration.id, integration.name)
        return integration

    async def update_integration(self, integration_id: int, changes: Dict[str, Any]) -> ApiIntegration:
        integration = await self.get_integration(integration_id)
        for field, value in changes.items():
            if value is None:
                continue
            if field == "base_url":
                value = value.rstrip("/")
            elif field == "auth_type":
                value = getattr(value, "value", value)
            setattr(integration, field, value)
        await self.db.commit()
        await self.db.refresh(integration)
        return integration

    async def delete_integration(self, integration_id: int) -> None:
        integration = await self.get_integration(integration_id)
        await self.db.delete(integration)
        await self.db.commit()
        logger.info("Deleted integration %s", integration_id)

    async def list_endpoints(self, integration_id: int) -> List[ApiEndpoint]:
        await self.get_integration(integration_id)
        result = await self.db.execute(
            select(ApiEndpoint)
            .where(ApiEndpoint.integration_id == integration_id)
            .order_by(ApiEndpoint.id)
        )
        return result.scalars().all()

    async def get_endpoint(self, integration_id: int, endpoint_id: int) -> ApiEndpoint:
        endpoint = await self.db.get(ApiEndpoint, endpoint_id)
        if not endpoint or endpoint.integration_id != integration_id:
            raise IntegrationNotFoundError(f"Endpoint {endpoint_id} not found for integration {integration_id}")
        return endpoint

    async def add_endpoint(self, integration_id: int, data: EndpointCreate) -> ApiEndpoint:
        await self.get_integration(integration_id)
        endpoint = ApiEndpoint(integration_id=integration_id, **data.model_dump(mode="json"))
        self.db.add(endpoint)
        await self.db.commit()
        await self.db.refresh(endpoint)
        return endpoint

    async def delete_endpoint(self, integration_id: int, endpoint_id: int) -> None:
        endpoint = await self.get_endpoint(integration_id, endpoint_id)
        await self.db.delete(endpoint)
        await self.db.commit()

    async def list_logs(self, integration_id: Optional[int] = None, limit: int = 50) -> List[ApiLog]:
        query = select(ApiLog).order_by(ApiLog.created_at.desc(), ApiLog.id.desc()).limit(min(max(limit, 1), 500))
        if integration_id is not None:
            query = query.where(ApiLog.integration_id == integration_id)
        result = await self.db.execute(query)
        return result.scalars().all()
