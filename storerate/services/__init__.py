"""Business logic services.

Services take an AsyncSession (or a RatingStore built on one) and raise
storerate.services.errors.* for expected failures. Routers stay thin.
"""
