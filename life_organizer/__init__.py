"""Life Organizer: client-side state store for a personal organizer."""
