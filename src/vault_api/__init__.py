"""Secret Cloud Storage: a checksum-deduplicating file storage API."""
