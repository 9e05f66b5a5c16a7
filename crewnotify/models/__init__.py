from crewnotify.models.document import DocumentRow

__all__ = ["DocumentRow"]
