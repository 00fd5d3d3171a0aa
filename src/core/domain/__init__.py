"""Modelos y entidades del dominio.

- Estructuras de datos puras y estrictas (Pydantic v2) y enums de modo.
- El dominio no conoce subprocess, HTTP ni la CLI.
"""
