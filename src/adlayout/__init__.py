"""Ad layout builder: grid slots, drag-and-drop placement and campaign rotation."""
