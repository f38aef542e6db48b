paths = [
    {
        "path": "Shared/Items",
        "addins": [
            {"id": "first", "type": "Item", "order": 10, "label": "alpha-first"},
        ],
    },
]
