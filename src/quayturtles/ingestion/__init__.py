"""Ingestion layer.

Adapters that turn inbound MQTT status messages into turtle updates.
"""

__all__: list[str] = []
