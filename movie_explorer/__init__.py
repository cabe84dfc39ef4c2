"""Movie Explorer: in-memory title index, ranked search and autocomplete."""
