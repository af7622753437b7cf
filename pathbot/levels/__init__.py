"""Level sourcing: provider payload parsing, the LLM-backed provider, and the loader with its fallbacks."""
