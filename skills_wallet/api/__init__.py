"""REST API for the skills wallet."""
