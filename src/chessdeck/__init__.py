"""chessdeck — move-sequence engine of a spaced-repetition chess-puzzle trainer."""
