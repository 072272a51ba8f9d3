"""
Academic role authorization service.

Layers, innermost first: domain (pure policies), application (services and
storage ports), infrastructure (SQLAlchemy persistence, settings, tokens)
and presentation (FastAPI routes).
"""
