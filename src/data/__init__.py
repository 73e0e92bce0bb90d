"""Series sintéticas de precios y catálogos de activos."""
