"""Chat-facing components: queue commands and scheduled announcements."""
