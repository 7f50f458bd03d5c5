"""Pydantic and dataclass models shared by the firewall and its middleware."""
