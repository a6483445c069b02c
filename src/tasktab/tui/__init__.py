"""Terminal front end for tasktab."""
