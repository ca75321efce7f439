"""Application services for Profile Arena."""
