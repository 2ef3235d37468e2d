"""Product request and provider quote models."""

from sqlalchemy import Column, Float, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import relationship, validates

from catalog_sync.models.base import BaseModel
from catalog_sync.models.enums import RequestStatus


class ProductRequest(BaseModel):
    """
    A request for a quantity of a catalog product.

    Attributes:
        product_id: Requested product
        product_name: Product name at request time
        quantity: Requested quantity
        personalization_remarks: Free text from the requester
        status: Request status
    """

    __tablename__ = "product_requests"

    product_id = Column(Integer, ForeignKey("products.id"), nullable=False)
    product_name = Column(String(255), nullable=False)
    quantity = Column(Float, nullable=False)
    personalization_remarks = Column(Text, nullable=True)
    status = Column(String(20), nullable=False, default=RequestStatus.PENDING.value)

    # Relationships
    product = relationship("Product")
    quotes = relationship(
        "ProviderQuote",
        back_populates="request",
        cascade="all, delete-orphan",
        order_by="ProviderQuote.created_at",
    )

    @validates("quantity")
    def validate_quantity(self, key, value):
        """Validate quantity is positive."""
        if value is None or value <= 0:
            raise ValueError("Quantity must be positive")
        return value

    def __repr__(self):
        """String representation of ProductRequest."""
        return f"<ProductRequest(id={self.id}, product_id={self.product_id}, quantity={self.quantity})>"


class ProviderQuote(BaseModel):
    """
    One provider's simulated answer to a product request.

    Attributes:
        request_id: Parent request
        provider_name: Provider label (e.g., "ProviderA")
        price: Total price for the requested quantity
        delivery_days: Promised delivery time
        reliability_score: Reliability on a 0-100 scale
        response_time: Simulated response latency in milliseconds
    """

    __tablename__ = "provider_quotes"

    request_id = Column(Integer, ForeignKey("product_requests.id"), nullable=False)
    provider_name = Column(String(100), nullable=False)
    price = Column(Float, nullable=False)
    delivery_days = Column(Integer, nullable=False)
    reliability_score = Column(Float, nullable=False)
    response_time = Column(Integer, nullable=False)

    # Relationships
    request = relationship("ProductRequest", back_populates="quotes")

    __table_args__ = (
        Index("idx_provider_quote_request_id", "request_id"),
    )

    def __repr__(self):
        """String representation of ProviderQuote."""
        return f"<ProviderQuote(id={self.id}, provider='{self.provider_name}', price={self.price})>"
