"""
Servicios del pipeline por registro (normalizacion, bloques, ingesta).
"""
