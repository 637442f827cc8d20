from pydantic import BaseModel


class PokemonListItem(BaseModel):
    name: str
    url: str
