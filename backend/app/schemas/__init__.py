"""Request and response models exchanged over the HTTP API."""
