"""
Alternative-date price comparison around a base departure date
"""
import asyncio
import logging
from datetime import date, timedelta
from typing import List, Optional

from .amadeus_service import AmadeusService
from .exceptions import AuthError, SearchError
from .models import DatePricePoint

logger = logging.getLogger(__name__)


class AlternativeDateScanner:
    """Searches the days around a base date and ranks them by cheapest fare"""

    def __init__(self, amadeus_service: AmadeusService):
        self._amadeus_service = amadeus_service

    async def _cheapest_price(self, origin: str, destination: str, day: date) -> Optional[float]:
        try:
            offers = await self._amadeus_service.search_flights(
                origin=origin,
                destination=destination,
                departure_date=day,
                adults=1,
                max_results=1,
            )
        except (AuthError, SearchError) as e:
            logger.warning(f"[DATE_SCANNER] Search for {day.isoformat()} failed: {e}")
            return None

        if not offers:
            return None
        try:
            return float(offers[0]["price"]["total"])
        except (KeyError, IndexError, TypeError, ValueError) as e:
            logger.error(f"[DATE_SCANNER] Unreadable price for {day.isoformat()}: {e!r}")
            return None

    async def scan(
        self,
        origin: str,
        destination: str,
        base_date: date,
        days_before: int = 3,
        days_after: int = 3,
    ) -> List[DatePricePoint]:
        """
        Return one price point per day in [-days_before, +days_after], base date excluded

        Days are searched concurrently; a failed day gets a None price instead
        of cancelling the others. Ordered cheapest first, None prices last,
        date order kept among ties.
        """
        days = [
            base_date + timedelta(days=offset)
            for offset in range(-days_before, days_after + 1)
            if offset != 0
        ]
        prices = await asyncio.gather(
            *(self._cheapest_price(origin, destination, day) for day in days)
        )

        points = [DatePricePoint(date=day, price=price) for day, price in zip(days, prices)]
        points.sort(key=lambda point: (point.price is None, point.price or 0.0))
        logger.info(f"[DATE_SCANNER] Scanned {len(points)} alternative dates for {origin} -> {destination}")
        return points
