"""Configuración por defecto (config.yaml)."""
