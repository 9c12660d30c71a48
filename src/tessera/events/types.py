class EventType:
    """Event names published by the editing core."""

    # A single cell was written or cleared; payload: layer, x, y, old, new
    CELL_CHANGED = "cell.changed"

    # Both layers were rebuilt from a history snapshot (undo)
    GRID_RESTORED = "grid.restored"

    # A flood fill finished; payload: layer, x, y, count
    FILL_COMPLETED = "fill.completed"

    # A cave placement batch was applied; payload: placed, total
    CAVE_PROGRESS = "cave.progress"

    # A cave placement finished; payload: layer, total
    CAVE_COMPLETED = "cave.completed"
