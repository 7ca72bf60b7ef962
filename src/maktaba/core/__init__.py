# ABOUTME: Core engine: the in-memory library mirror, import pipeline, and search.
# ABOUTME: Everything here reads the corpus through Library and never touches SQLite directly.
