"""Adapters for storage, mail and text generation used by the app."""

from .blob_storage import BlobStorage
from .content_generator import ContentGenerator
from .mailer import Mailer, MailNotConfigured

__all__ = [
    "BlobStorage",
    "ContentGenerator",
    "Mailer",
    "MailNotConfigured",
]
