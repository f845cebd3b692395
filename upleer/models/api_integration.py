# upleer/models/api_integration.py
from sqlalchemy import Column, Integer, String, Text, Boolean, ForeignKey, TIMESTAMP, func
from sqlalchemy.orm import relationship

from upleer.database import Base
from upleer.models.base import JSONType, utcnow


class ApiIntegration(Base):
    __tablename__ = "api_integrations"

    id = Column(Integer, primary_key=True)
    name = Column(String, nullable=False)
    description = Column(Text)
    base_url = Column(String, nullable=False)
    auth_type = Column(String, nullable=False)  # api_key, oauth, bearer, basic
    auth_config = Column(JSONType, nullable=False, default=dict)
    headers = Column(JSONType)
    is_active = Column(Boolean, default=True)
    created_at = Column(TIMESTAMP(timezone=False), default=utcnow, server_default=func.now())
    updated_at = Column(TIMESTAMP(timezone=False), default=utcnow, onupdate=utcnow, server_default=func.now())

    endpoints = relationship("ApiEndpoint", back_populates="integration", cascade="all, delete-orphan")
    logs = relationship("ApiLog", back_populates="integration", cascade="all, delete-orphan")


class ApiEndpoint(Base):
    __tablename__ = "api_endpoints"

    id = Column(Integer, primary_key=True)
    integration_id = Column(Integer, ForeignKey("api_integrations.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String, nullable=False)
    endpoint = Column(String, nullable=False)
    method = Column(String, nullable=False)
    request_body = Column(JSONType)
    response_mapping = Column(JSONType)
    is_active = Column(Boolean, default=True)
    created_at = Column(TIMESTAMP(timezone=False), default=utcnow, server_default=func.now())
    updated_at = Column(TIMESTAMP(timezone=False), default=utcnow, onupdate=utcnow, server_default=func.now())

    integration = relationship("ApiIntegration", back_populates="endpoints")
    logs = relationship("ApiLog", back_populates="endpoint")


class ApiLog(Base):
    """One outbound call made by the endpoint tester."""
    __tablename__ = "api_logs"

    id = Column(Integer, primary_key=True)
    integration_id = Column(Integer, ForeignKey("api_integrations.id"), nullable=False, index=True)
    endpoint_id = Column(Integer, ForeignKey("api_endpoints.id"), nullable=True)
    method = Column(String, nullable=False)
    url = Column(Text, nullable=False)
    request_headers = Column(JSONType)
    request_body = Column(JSONType)
    response_status = Column(Integer)
    response_headers = Column(JSONType)
    response_body = Column(JSONType)
    response_time = Column(Integer)  # milliseconds
    error_message = Column(Text)
    created_at = Column(TIMESTAMP(timezone=False), default=utcnow, server_default=func.now())

    integration = relationship("ApiIntegration", back_populates="logs")
    endpoint = relationship("ApiEndpoint", back_populates="logs")
