from starlette.requests import Request


def get_log(request: Request) -> str:
    return "Got the log"


def post_log(request: Request) -> str:
    return "Posted something to the log"


paths = [
    {
        "path": "Web/Routes",
        "addins": [
            {
                "type": "Route",
                "order": 100,
                "route": "/admin/log",
                "verb": "get",
                "handler": get_log,
            },
            {
                "id": "postAdminLog",
                "type": "Route",
                "order": 100,
                "route": "/admin/log",
                "verb": "post",
                "handler": post_log,
            },
        ],
    },
    {
        "path": "Modules/Admin/Routers",
        "addins": [
            {
                "type": "Route",
                "route": "/log",
                "verb": "get",
                "handler": get_log,
            },
        ],
    },
]
