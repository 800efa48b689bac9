"""Change-data-capture handlers."""
from .handlers import CdcHandler, get_cdc_handler_registry, register_cdc_handler

__all__ = ["CdcHandler", "get_cdc_handler_registry", "register_cdc_handler"]
