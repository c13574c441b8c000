"""Pure helpers shared by the pipeline: parsing, credentials, validation."""
