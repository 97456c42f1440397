"""Pure pipeline logic: parsing, extraction, prompts and message formatting."""
