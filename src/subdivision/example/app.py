"""The example host: discover manifests, start the engine, build ``Web/Routes``, serve."""

import asyncio
import logging

from starlette.applications import Starlette

import subdivision.example.modules
from subdivision import Subdivision, discover_manifests
from subdivision.web import create_application, create_server, install_builders

logger = logging.getLogger(__name__)

ROUTES_PATH = "Web/Routes"


async def create_app(engine: Subdivision | None = None) -> Starlette:
    if engine is None:
        engine = Subdivision()
    await engine.start(discover_manifests(subdivision.example.modules))
    install_builders(engine)
    return create_application(engine.build(ROUTES_PATH))


async def _serve(host: str, port: int) -> None:
    server = create_server(await create_app(), host=host, port=port)
    logger.info("Example app listening at http://%s:%s", host, port)
    await server.serve()


def main(host: str = "127.0.0.1", port: int = 9000) -> None:
    logging.basicConfig(level=logging.INFO)
    asyncio.run(_serve(host, port))


if __name__ == "__main__":
    main()
