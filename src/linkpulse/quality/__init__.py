"""Connection quality scoring, history insights, and activity suitability."""
