"""Routers mounted under ``/api/erp``."""
