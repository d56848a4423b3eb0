"""Query composition: which records go on a page, and in what order."""
