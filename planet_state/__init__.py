"""Planet generation state: settings and the tick-driven generator."""

from planet_state.settings import ErosionSettings, NoiseSettings, PlanetSettings, WeatherSettings
from planet_state.generator import GeneratorState, TerrainGenerator, TickStatus

__all__ = [
    "ErosionSettings",
    "NoiseSettings",
    "PlanetSettings",
    "WeatherSettings",
    "GeneratorState",
    "TerrainGenerator",
    "TickStatus",
]
