"""
Utility modules for the automation gateway
"""
from .config_loader import GatewaySettings, load_gateway_settings, pick_env

__all__ = [
    'GatewaySettings',
    'load_gateway_settings',
    'pick_env',
]
