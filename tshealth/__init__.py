"""tshealth - health scoring for TypeScript/JavaScript source files."""

__version__ = "0.1.0"
