"""Middleware adapters that put the firewall in front of ASGI applications."""
