"""
Pipeline de ingesta one-way: base de datos Notion -> content store.

Pensado para ejecutarse como job (build del sitio / cron), no dentro del
request/response de un API.

Objetivos de diseño:
- Validación estricta de las respuestas de Notion antes de tocar el store.
- Normalización de propiedades heterogéneas a un registro plano.
- Full-replace del store con digest por entrada para detectar cambios.
"""

__version__ = "1.0.0"
