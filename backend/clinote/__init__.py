"""Clinical notes workspace core."""
