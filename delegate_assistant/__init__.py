"""Outlook delegate assistant: mail, calendar and token commands acting on an owner's mailbox."""

__version__ = "0.1.0"
