"""Message-level crisis analysis for chat turns."""
