"""Simulated provider quotes for product requests."""

import asyncio
import random
from typing import Awaitable, Callable, List, Optional, Sequence, Tuple

from sqlalchemy.orm import Session

from catalog_sync.config import settings
from catalog_sync.models.product import Product
from catalog_sync.models.quote import ProductRequest, ProviderQuote
from catalog_sync.schemas.quote import ProviderProfile, Quote
from catalog_sync.utils.logger import logger

DEFAULT_PROVIDERS: Tuple[ProviderProfile, ...] = (
    ProviderProfile(
        name="ProviderA",
        multiplier=0.95,
        variance=0.15,
        delivery_days=(3, 7),
        reliability=(85, 95),
        latency_ms=(500, 1500),
    ),
    ProviderProfile(
        name="ProviderB",
        multiplier=1.0,
        variance=0.20,
        delivery_days=(5, 10),
        reliability=(75, 90),
        latency_ms=(1000, 2500),
    ),
    ProviderProfile(
        name="ProviderC",
        multiplier=1.05,
        variance=0.10,
        delivery_days=(7, 14),
        reliability=(90, 99),
        latency_ms=(800, 3000),
    ),
)

SleepFunc = Callable[[float], Awaitable[None]]


class QuoteSimulationEngine:
    """
    Simulates querying several providers for a price at once.

    Every random draw for a quote (latency, price variation, delivery days,
    reliability) is made before any provider "responds", so a seeded
    ``random.Random`` gives the same quotes on every run.
    """

    def __init__(
        self,
        providers: Optional[Sequence[ProviderProfile]] = None,
        rng: Optional[random.Random] = None,
        sleep: Optional[SleepFunc] = None,
        latency_scale: Optional[float] = None,
    ):
        """
        Initialize the engine.

        Args:
            providers: Provider profiles, defaults to ProviderA/B/C
            rng: Random source
            sleep: Coroutine used to simulate latency
            latency_scale: Multiplier on simulated latency, 0 disables waiting
        """
        self.providers = list(providers) if providers is not None else list(DEFAULT_PROVIDERS)
        self.rng = rng or random.Random()
        self.sleep = sleep or asyncio.sleep
        self.latency_scale = settings.quote_latency_scale if latency_scale is None else latency_scale

    def simulate_quote(self, provider: ProviderProfile, quantity: float, base_price: float) -> Quote:
        """
        Draw one provider's quote without waiting.

        Price is ``base_price * multiplier * (1 + variation) * quantity``
        with the variation uniform in ``[-variance, +variance]``.
        """
        delay = self._between(*provider.latency_ms)
        variation = self._between(-provider.variance, provider.variance)
        price = base_price * provider.multiplier * (1 + variation) * quantity
        delivery_days = round(self._between(*provider.delivery_days))
        reliability = self._between(*provider.reliability)

        return Quote(
            provider_name=provider.name,
            price=round(price, 2),
            delivery_days=delivery_days,
            reliability_score=round(reliability, 2),
            response_time=round(delay),
        )

    async def get_quotes(self, product_id: int, quantity: float, base_price: float) -> List[Quote]:
        """
        Query every provider concurrently.

        Returns only once all providers have answered, in provider order.
        """
        quotes = [self.simulate_quote(provider, quantity, base_price) for provider in self.providers]
        logger.debug(f"Requesting {len(quotes)} provider quotes for product {product_id}")
        return list(await asyncio.gather(*(self._respond(quote) for quote in quotes)))

    async def _respond(self, quote: Quote) -> Quote:
        delay = quote.response_time / 1000.0 * self.latency_scale
        if delay > 0:
            await self.sleep(delay)
        return quote

    def _between(self, low: float, high: float) -> float:
        return self.rng.random() * (high - low) + low


class QuoteService:
    """Stores product requests together with their simulated quotes."""

    def __init__(self, engine: Optional[QuoteSimulationEngine] = None):
        """Initialize quote service."""
        self.engine = engine or QuoteSimulationEngine()

    async def request_quotes(
        self,
        db: Session,
        product_id: int,
        quantity: float,
        remarks: Optional[str] = None,
    ) -> Tuple[ProductRequest, List[ProviderQuote]]:
        """
        Create a product request and collect a quote from every provider.

        Args:
            db: Database session
            product_id: Requested product
            quantity: Requested quantity
            remarks: Personalization remarks

        Returns:
            Tuple of (request, stored quotes)

        Raises:
            ValueError: If the product does not exist or quantity is not positive
        """
        product = db.get(Product, product_id)
        if not product:
            raise ValueError(f"Product {product_id} not found")

        base_price = product.price or 0.0
        request = ProductRequest(
            product_id=product.id,
            product_name=product.name,
            quantity=quantity,
            personalization_remarks=remarks,
        )

        quotes = await self.engine.get_quotes(product.id, quantity, base_price)

        try:
            db.add(request)
            db.flush()
            rows = [
                ProviderQuote(request_id=request.id, **quote.model_dump())
                for quote in quotes
            ]
            db.add_all(rows)
            db.commit()
        except Exception as e:
            db.rollback()
            logger.error(f"Error storing quotes for product {product_id}: {e}")
            raise

        logger.info(f"Stored {len(rows)} quotes for request {request.id} (product {product_id})")
        return request, rows

    def list_quotes(self, db: Session, request_id: int) -> List[ProviderQuote]:
        """Return the stored quotes of a request in creation order."""
        return (
            db.query(ProviderQuote)
            .filter(ProviderQuote.request_id == request_id)
            .order_by(ProviderQuote.created_at, ProviderQuote.id)
            .all()
        )
