"""Stories app package: bookable status, length and capacity of a story."""
