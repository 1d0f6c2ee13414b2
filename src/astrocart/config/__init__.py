"""Configuration layer: TOML sections, unified settings and logging setup."""
