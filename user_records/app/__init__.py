"""User records service application package."""
