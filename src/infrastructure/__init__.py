"""
infrastructure - Concrete implementations of domain ports.

Contains all vendor-specific code: LangChain chat models, Redis, Open-Meteo.
Depends on domain/ only (implements ports). Never imported by application/.
"""
