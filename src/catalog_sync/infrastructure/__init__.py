"""Clients for the upstream APIs and supporting stores."""
