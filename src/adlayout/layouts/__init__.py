"""Ad layout builder feature: grid model, drag and drop, campaign library."""

from .campaign_filter import CampaignQuery, filter_campaigns
from .drag_drop import DragDropController, DragState
from .grid import SlotGrid, cell_to_pixel_rect, cells_per_row, pixel_to_cell
from .layouts_service import LayoutBuilder

__all__ = [
    "CampaignQuery",
    "DragDropController",
    "DragState",
    "LayoutBuilder",
    "SlotGrid",
    "cell_to_pixel_rect",
    "cells_per_row",
    "filter_campaigns",
    "pixel_to_cell",
]
