"""Term extraction, the glossary registry and consistency checking."""
