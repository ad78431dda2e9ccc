from .documents import AttachmentAttribute, Invoice, Payment

__all__ = [
    "AttachmentAttribute",
    "Invoice",
    "Payment",
]
