"""Terminal presentation layer: click commands, formatters, structured events."""
