from listing.controllers.list_controller import ListController, RowState

__all__ = ["ListController", "RowState"]
