"""Outlook Delegate Assistant metadata."""

APP_ID = "outlook-delegate"
PURPOSE = "Read and manage another user's Outlook mail and calendar as their delegate"
