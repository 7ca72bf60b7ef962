# ABOUTME: Readers for on-disk and downloaded book formats.
# ABOUTME: Currently the ZIP archive layout with manifest.json and per-page text files.
