# ABOUTME: Maktaba, an offline reader and full-text search engine for paginated Arabic books.
# ABOUTME: Package root; subpackages hold text rules, storage, the core engine, and the CLI.

__version__ = "0.1.0"
