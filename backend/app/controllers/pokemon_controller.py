from typing import Any

from app.core.exceptions import APIError
from app.core.pokeapi import PokeAPIClient, PokemonNotFound


async def list_all_pokemon(client: PokeAPIClient) -> list[dict[str, Any]]:
    return await client.list_all_pokemon()


async def get_pokemon_by_id_or_name(id_or_name: str, client: PokeAPIClient) -> dict[str, Any]:
    try:
        return await client.get_pokemon(id_or_name)
    except PokemonNotFound:
        raise APIError(404, error="Pokemon not found")
