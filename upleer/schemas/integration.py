# upleer/schemas/integration.py
from datetime import datetime
from typing import Any, Dict, Optional

from pydantic import Field, field_validator

from upleer.core.enums import IntegrationAuthType
from upleer.schemas.base import BaseSchema

HTTP_METHODS = ("GET", "POST", "PUT", "PATCH", "DELETE")


def _method(value):
    method = str(value or "").strip().upper()
    if method not in HTTP_METHODS:
        raise ValueError(f"method must be one of {', '.join(HTTP_METHODS)}")
    return method


class IntegrationCreate(BaseSchema):
    name: str = Field(min_length=1)
    description: Optional[str] = None
    base_url: str = Field(min_length=1)
    auth_type: IntegrationAuthType
    auth_config: Dict[str, Any] = Field(default_factory=dict)
    headers: Optional[Dict[str, str]] = None
    is_active: bool = True

    @field_validator("base_url")
    @classmethod
    def _http_url(cls, v):
        if not v.startswith(("http://", "https://")):
            raise ValueError("base_url must start with http:// or https://")
        return v.rstrip("/")


IntegrationUpdate = IntegrationCreate.create_update_model("IntegrationUpdate")


class IntegrationRead(BaseSchema):
    id: int
    name: str
    description: Optional[str] = None
    base_url: str
    auth_type: str
    headers: Optional[Dict[str, str]] = None
    is_active: Optional[bool] = None
    created_at: Optional[datetime] = None


class EndpointCreate(BaseSchema):
    name: str = Field(min_length=1)
    endpoint: str = Field(min_length=1)
    method: str
    request_body: Optional[Any] = None
    response_mapping: Optional[Dict[str, Any]] = None
    is_active: bool = True

    @field_validator("method", mode="before")
    @classmethod
    def _valid_method(cls, v):
        return _method(v)


class EndpointRead(BaseSchema):
    id: int
    integration_id: int
    name: str
    endpoint: str
    method: str
    request_body: Optional[Any] = None
    response_mapping: Optional[Dict[str, Any]] = None
    is_active: Optional[bool] = None


class EndpointTestRequest(BaseSchema):
    """Either an endpoint id, or an ad-hoc method and path."""
    endpoint_id: Optional[int] = None
    method: Optional[str] = None
    path: Optional[str] = None
    headers: Dict[str, str] = Field(default_factory=dict)
    params: Dict[str, Any] = Field(default_factory=dict)
    body: Optional[Any] = None

    @field_validator("method", mode="before")
    @classmethod
    def _valid_method(cls, v):
        return None if v is None else _method(v)


class ApiLogRead(BaseSchema):
    id: int
    integration_id: int
    endpoint_id: Optional[int] = None
    method: str
    url: str
    response_status: Optional[int] = None
    response_time: Optional[int] = None
    error_message: Optional[str] = None
    created_at: Optional[datetime] = None
