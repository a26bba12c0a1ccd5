"""Generate the TypeScript class declarations from the canonical entities."""
