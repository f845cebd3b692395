# upleer/models/user.py
from sqlalchemy import Column, String, TIMESTAMP, func
from sqlalchemy.orm import relationship

from upleer.database import Base
from upleer.core.enums import UserRole
from upleer.models.base import utcnow


class User(Base):
    __tablename__ = "users"

    id = Column(String, primary_key=True)
    email = Column(String, unique=True, nullable=False)
    password = Column(String, nullable=True)
    first_name = Column(String)
    last_name = Column(String)
    phone = Column(String)
    profile_image_url = Column(String)
    role = Column(String, nullable=False, default=UserRole.AUTHOR.value, server_default=UserRole.AUTHOR.value)

    created_at = Column(TIMESTAMP(timezone=False), default=utcnow, server_default=func.now())
    updated_at = Column(TIMESTAMP(timezone=False), default=utcnow, onupdate=utcnow, server_default=func.now())

    products = relationship("Product", back_populates="owner")
    sales = relationship("Sale", back_populates="author")

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN.value

    def __repr__(self) -> str:
        return f"<User id={self.id} email={self.email} role={self.role}>"
