"""Pure generation engine: level scaling, encounters and maps."""
