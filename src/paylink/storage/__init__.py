from .document_store import JsonDocumentSource, OutboxSender

__all__ = ["JsonDocumentSource", "OutboxSender"]
