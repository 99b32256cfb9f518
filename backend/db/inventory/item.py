import uuid

from sqlalchemy import BigInteger, Column, DateTime, ForeignKey, Numeric, String, Text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from ..database import Base


class InventoryItem(Base):
    __tablename__ = "inventory_items"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)

    # Tenant key: every query filters on the caller's id.
    user_id = Column(UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    name = Column(String, nullable=False)
    category = Column(String, nullable=False, index=True)
    quantity = Column(Numeric(14, 3), nullable=False, default=0)
    # 'kg' | 'g' | 'liters' | 'ml' | 'pieces' | 'boxes' | 'cans' | 'bottles'
    unit = Column(Text, nullable=False)
    min_stock = Column(Numeric(14, 3), nullable=False, default=0)
    price_minor = Column(BigInteger, nullable=False, default=0)
    supplier = Column(String, nullable=True)

    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
        index=True,
    )

    user = relationship("User", back_populates="inventory_items")
