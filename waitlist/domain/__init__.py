"""Pure domain rules (validation, entities) with no I/O."""
