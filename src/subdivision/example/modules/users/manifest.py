import logging

from starlette.middleware.base import RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

logger = logging.getLogger(__name__)


async def verify_user(request: Request, call_next: RequestResponseEndpoint) -> Response:
    logger.info("Verified user")
    return await call_next(request)


async def do_something_with_user(request: Request, call_next: RequestResponseEndpoint) -> Response:
    logger.info("Did something with user")
    return await call_next(request)


def get_user(request: Request) -> str:
    return "User info"


paths = [
    {
        "path": "Web/Routes",
        "addins": [
            {
                "id": "verifyUser",
                "type": "Route",
                "order": 0,
                "verb": "use",
                "handler": verify_user,
            },
            {
                "id": "doSomethingWithUser",
                "type": "Route",
                "order": ">verifyUser",
                "verb": "use",
                "handler": do_something_with_user,
            },
            {
                "type": "Route",
                "order": ">>doSomethingWithUser",
                "route": "/user",
                "verb": "get",
                "handler": get_user,
            },
        ],
    },
]
