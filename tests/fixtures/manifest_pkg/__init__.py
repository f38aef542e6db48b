"""Manifest discovery fixtures: ``alpha`` and ``beta.nested`` each declare addins."""
