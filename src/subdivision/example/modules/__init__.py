"""Feature modules. Each subpackage declares its addins in a ``manifest`` module."""
