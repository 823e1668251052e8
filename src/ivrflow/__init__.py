"""IVR script XML to flowchart compiler (DOT, SVG, Mermaid, PlantUML)."""

__version__ = "0.1.0"
