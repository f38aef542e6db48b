"""
Example application: three independently written modules contribute routes
to one Starlette app without importing each other.

- ``modules.users`` adds two middleware steps and ``GET /user``, ordered relative to each other.
- ``modules.admin`` adds ``GET``/``POST /admin/log`` and the routes of ``Modules/Admin/Routers``.
- ``modules.general`` mounts ``Modules/Admin/Routers`` under ``/modules/admin`` via two nested sub-routers.
"""
