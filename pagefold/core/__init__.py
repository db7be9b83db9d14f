"""Core (I/O-light) building blocks of pagefold."""
