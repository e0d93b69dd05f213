from .process_selection import ProcessSelectionService

__all__ = ["ProcessSelectionService"]
