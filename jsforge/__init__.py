"""jsforge -- interactive scaffolding for JavaScript and TypeScript projects."""

__version__ = "0.1.0"
