"""
Integración one-way: database de Notion -> content store.

Este paquete está diseñado para ejecutarse como job (cron / build del sitio),
no como parte de un request/response.

Objetivos de diseño:
- Validación estricta del envelope: un cambio incompatible de la API aborta
  la corrida antes de tocar el store.
- Degradación por campo y descarte por registro: un registro malo no frena
  a los demás.
- Cliente HTTP mínimo (httpx) con reintentos; sin SDK.
"""
