"""
Domain Layer

This package contains business logic organized by domain area.
Domain services implement the compiler algorithms and should not
directly handle external I/O (use the clients layer for that).

Domains:
- ivr_script: XML ingestion, module extraction, edge derivation
- graph: deduplicated graph model
- emitters: DOT, Mermaid and PlantUML serialization
"""
