"""Interfaces/abstracciones del Core.

- Contratos (Protocol) que implementan los adaptadores de kubectl, helm y HTTP.
- El pipeline depende de estas abstracciones, nunca de subprocess.
"""
