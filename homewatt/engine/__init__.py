"""Pure simulation, forecasting and recommendation models.

Nothing in this package touches the database; services feed it rows and
persist what it returns.
"""
