from sqlalchemy import Column, Integer, String, Float, DateTime
from sqlalchemy.sql import func
from ..core.db import Base


class Medicine(Base):
    """Catalog entry; (name, strength, form) identifies a product."""

    __tablename__ = "medicines"

    id = Column(Integer, primary_key=True, index=True)

    # "" rather than NULL when a product has no strength or form
    name = Column(String(120), nullable=False, index=True)
    strength = Column(String(60), nullable=False, default="")
    form = Column(String(40), nullable=False, default="")

    selling_price = Column(Float, nullable=False, default=0.0)

    # Inventory, never negative after a dispense
    stock_qty = Column(Integer, nullable=False, default=0)
    reorder_level = Column(Integer, nullable=False, default=0)

    manufacturer = Column(String(120), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    @property
    def is_low_stock(self) -> bool:
        return (self.stock_qty or 0) <= (self.reorder_level or 0)

    def label(self) -> str:
        """e.g. ``Paracetamol 500 mg tablet``; blank parts are skipped."""
        return " ".join(p for p in (self.name, self.strength, self.form) if p)

    def __repr__(self):
        return f"<Medicine(id={self.id}, {self.label()!r}, stock={self.stock_qty}, price={self.selling_price})>"
