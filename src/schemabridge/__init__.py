"""schemabridge: translate between Laravel migrations and PlantUML ER diagrams."""

__version__ = "0.1.0"
