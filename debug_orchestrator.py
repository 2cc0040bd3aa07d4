# debug_orchestrator.py
import asyncio
import json
import sys

from excursion_engine.config import Settings
from excursion_engine.orchestrator import build_sources, select_candidates
from excursion_engine.schemas import Coordinates, UserContext


async def main():
    lat = float(sys.argv[1]) if len(sys.argv) > 1 else 40.7829
    lon = float(sys.argv[2]) if len(sys.argv) > 2 else -73.9654
    minutes = int(sys.argv[3]) if len(sys.argv) > 3 else 45

    settings = Settings.from_env()
    context = UserContext(
        location=Coordinates(latitude=lat, longitude=lon),
        time_available_minutes=minutes,
        energy_level="medium",
        mood="stressed",
        goal="relax",
        mobility_level="full",
    )

    selection = await select_candidates(context, build_sources(settings), settings)
    print(json.dumps(selection.model_dump(mode="json"), indent=2))


if __name__ == "__main__":
    asyncio.run(main())
