"""Shared library for the Outlook delegate assistant: config, credentials, Graph client, CLI plumbing."""
