"""Thin async client for the public PokéAPI."""

import logging
from typing import Any

import httpx

logger = logging.getLogger(__name__)

LIST_PAGE_SIZE = 1000


class PokemonNotFound(LookupError):
    pass


class PokeAPIClient:
    def __init__(
        self,
        base_url: str,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self._client = httpx.AsyncClient(timeout=timeout, transport=transport)

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _get_json(self, url: str, params: dict[str, Any] | None = None) -> Any:
        response = await self._client.get(url, params=params)
        response.raise_for_status()
        return response.json()

    async def get_pokemon(self, id_or_name: str) -> dict[str, Any]:
        """Full PokéAPI record for one Pokémon. Raises PokemonNotFound on 404."""
        try:
            return await self._get_json(f"{self.base_url}/pokemon/{id_or_name.lower()}")
        except httpx.HTTPStatusError as exc:
            if exc.response.status_code == 404:
                raise PokemonNotFound(id_or_name) from exc
            raise

    async def list_all_pokemon(self) -> list[dict[str, Any]]:
        """Every ``{name, url}`` entry, following ``next`` links until exhausted."""
        results: list[dict[str, Any]] = []
        url: str | None = f"{self.base_url}/pokemon"
        params: dict[str, Any] | None = {"limit": LIST_PAGE_SIZE}

        while url:
            page = await self._get_json(url, params=params)
            results.extend(page.get("results", []))
            url = page.get("next")
            # ``next`` already carries its own query string
            params = None

        logger.debug("Fetched %d pokemon from PokéAPI", len(results))
        return results
