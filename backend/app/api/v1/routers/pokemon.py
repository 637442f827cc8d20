from fastapi import APIRouter, Depends, Path

from app.api.deps import get_pokeapi_client
from app.controllers import pokemon_controller
from app.core.pokeapi import PokeAPIClient
from app.schemas.pokemon import PokemonListItem

router = APIRouter(prefix="/pokemon", tags=["pokemon"])


@router.get("", response_model=list[PokemonListItem])
async def list_all_pokemon(client: PokeAPIClient = Depends(get_pokeapi_client)):
    """Every Pokémon PokéAPI knows about, as ``{name, url}`` pairs."""
    return await pokemon_controller.list_all_pokemon(client)


@router.get("/{id_or_name}")
async def get_pokemon(
    id_or_name: str = Path(min_length=1, max_length=50, pattern=r"^[a-zA-Z0-9\-]+$"),
    client: PokeAPIClient = Depends(get_pokeapi_client),
):
    """Proxy a single PokéAPI record by national dex number or name."""
    return await pokemon_controller.get_pokemon_by_id_or_name(id_or_name, client)
