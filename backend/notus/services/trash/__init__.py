from notus.services.trash.service import DocumentTrash

__all__ = ["DocumentTrash"]
