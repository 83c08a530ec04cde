"""Развёртывание n8n за nginx-proxy с Let's Encrypt на одном Docker-хосте."""

__version__ = "1.0.0"
