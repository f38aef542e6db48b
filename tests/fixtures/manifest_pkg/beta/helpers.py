"""Not a manifest; discovery must skip it."""

paths = "ignored"
