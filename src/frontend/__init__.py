"""Qt user interface of the activity graph."""
