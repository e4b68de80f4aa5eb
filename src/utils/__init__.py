"""
Utility modules for the billing agreement broker
"""
from .config_loader import AppConfig, ChargeDefaults, PayPalConfig, ServerConfig, load_app_config

__all__ = [
    'AppConfig',
    'ChargeDefaults',
    'PayPalConfig',
    'ServerConfig',
    'load_app_config',
]
