"""Application workflows that wire runtime configuration into the parser."""
