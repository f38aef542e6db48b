paths = [
    {
        "path": "Modules/General/Routers",
        "addins": [
            {
                "type": "SubRouter",
                "order": 100,
                "mount": "/admin",
                "routes_path": "Modules/Admin/Routers",
            },
        ],
    },
    {
        "path": "Web/Routes",
        "addins": [
            {
                "type": "SubRouter",
                "order": 200,
                "mount": "/modules",
                "routes_path": "Modules/General/Routers",
            },
        ],
    },
]
