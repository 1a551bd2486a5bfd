"""Prices API client - mapping, latest prices, aggregates, history."""

from prices_client.base import BaseClient


class PricesClient(BaseClient):
    """Client for the real-time prices endpoints."""

    async def latest(self) -> dict[str, dict]:
        """GET /latest - latest high/low per item id."""
        resp = await self._get("latest")
        return resp.get("data", {})

    async def mapping(self) -> list[dict]:
        """GET /mapping - static metadata for every item."""
        return await self._get("mapping")

    async def five_minute(self) -> dict[str, dict]:
        """GET /5m - 5-minute averages and volumes."""
        resp = await self._get("5m")
        return resp.get("data", {})

    async def one_hour(self) -> dict[str, dict]:
        """GET /1h - 1-hour averages and volumes."""
        resp = await self._get("1h")
        return resp.get("data", {})

    async def six_hour(self) -> dict[str, dict]:
        """GET /6h - 6-hour averages and volumes."""
        resp = await self._get("6h")
        return resp.get("data", {})

    async def one_day(self) -> dict[str, dict]:
        """GET /24h - 24-hour averages and volumes."""
        resp = await self._get("24h")
        return resp.get("data", {})

    async def volumes(self) -> dict[str, int]:
        """GET /volumes - daily traded volume per item id."""
        resp = await self._get("volumes")
        return resp.get("data", {})

    async def timeseries(self, item_id: int, timestep: str) -> list[dict]:
        """GET /timeseries?timestep=..&id=.. - ordered history buckets."""
        resp = await self._get("timeseries", params={"timestep": timestep, "id": item_id})
        return resp.get("data", [])
