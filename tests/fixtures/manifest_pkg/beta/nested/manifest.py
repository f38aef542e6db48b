paths = [
    {
        "path": "Shared/Items",
        "addins": [
            {"type": "Item", "order": ">first", "label": "beta-after-first"},
            {"type": "Item", "order": 5, "label": "beta-early"},
        ],
    },
    {
        "path": "Beta/Only",
        "addins": [],
    },
]
