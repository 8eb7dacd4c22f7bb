"""LoRaWAN network-server adaptive data rate."""

from .controller import AdrComponent, AdrConfig, load_config

__all__ = ["AdrComponent", "AdrConfig", "load_config"]
