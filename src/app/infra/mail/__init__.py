"""Envio de e-mail (Gmail API)."""

from .gmail_client import GmailMailSender, build_raw_message

__all__ = ["GmailMailSender", "build_raw_message"]
